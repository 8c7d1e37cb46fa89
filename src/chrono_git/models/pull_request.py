"""Pull request model for the simulated hosting service."""

import random
import string
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import Field

from ..errors import InvalidTransitionError
from .base import CamelModel


class PullRequestStatus(str, Enum):
    """Lifecycle state of a pull request."""

    OPEN = "open"
    MERGED = "merged"
    CLOSED = "closed"


def generate_pull_request_id() -> str:
    """Return an id of the form ``pr-<millis>-<7 base36 chars>``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))  # noqa: S311
    return f"pr-{int(time.time() * 1000)}-{suffix}"


class PullRequest(CamelModel):
    """A proposal to merge a branch of one repository into a branch of another."""

    id: str = Field(default_factory=generate_pull_request_id)
    title: str
    description: str = ""
    source_url: str
    source_branch: str
    target_url: str
    target_branch: str
    author: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: PullRequestStatus = PullRequestStatus.OPEN
    merged_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status == PullRequestStatus.OPEN

    def mark_merged(self, merged_at: Optional[datetime] = None) -> None:
        """Transition ``open -> merged``."""
        self._ensure_open("merge")
        self.status = PullRequestStatus.MERGED
        self.merged_at = merged_at or datetime.now(timezone.utc)

    def close(self) -> None:
        """Transition ``open -> closed``."""
        self._ensure_open("close")
        self.status = PullRequestStatus.CLOSED

    def _ensure_open(self, action: str) -> None:
        if not self.is_open:
            raise InvalidTransitionError(
                f"Cannot {action} pull request {self.id}: it is already {self.status.value}"
            )
