"""Logging setup for the command line front end."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
HANDLER_NAME = "chrono_git"


def setup_logging(level: str = "WARNING") -> None:
    """Attach a stderr handler to the ``chrono_git`` logger.

    Library modules only create loggers; handlers are installed here, once.
    """
    package_logger = logging.getLogger("chrono_git")
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if not any(h.get_name() == HANDLER_NAME for h in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
