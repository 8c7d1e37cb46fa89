"""Result type returned by every engine operation."""

from typing import Optional

from pydantic import BaseModel


class GitResult(BaseModel):
    """Outcome of one command.

    ``message`` is a Git-flavored line for display, ``output`` is terminal
    output (may be empty), ``error`` is a short machine-oriented reason that
    is only set on failure.
    """

    success: bool
    message: str
    output: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, message: str, output: str = "") -> "GitResult":
        return cls(success=True, message=message, output=output)

    @classmethod
    def fail(cls, message: str, error: str, output: Optional[str] = None) -> "GitResult":
        return cls(success=False, message=message, error=error, output=output)
