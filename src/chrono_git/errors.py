"""Exception types for Chrono Git.

Expected command failures (missing files, unknown branches, conflicts) are
reported through ``GitResult`` values. The exceptions below are reserved for
corrupt input and programmer errors.
"""


class ChronoGitError(Exception):
    """Base class for all Chrono Git exceptions."""


class SnapshotError(ChronoGitError):
    """A repository or network snapshot could not be loaded."""


class ConfigurationError(ChronoGitError):
    """Settings file is unreadable or invalid."""


class InvalidTransitionError(ChronoGitError):
    """A pull request was asked to leave a terminal state."""


class ExecutorConfigurationError(ChronoGitError):
    """A command in the vocabulary has no handler."""
