"""Simulated hosting service: remote stores addressable by URL and pull requests."""

import json
import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from chrono_git.core.repository import Repository
from chrono_git.errors import SnapshotError
from chrono_git.models import NetworkSnapshot, PullRequest

logger = logging.getLogger(__name__)


class RemoteNetwork:
    """The "network" every engine talks to for clone, push, fetch, fork and PRs.

    One instance is owned by the caller and handed to each ``GitEngine`` that
    should see the same remotes. Tests create a fresh instance per scenario
    or call ``clear()`` and ``clear_pull_requests()``.
    """

    def __init__(self):
        self._repositories: Dict[str, Repository] = {}
        self._pull_requests: Dict[str, PullRequest] = {}

    # Remote stores

    def register(self, url: str, store: Repository) -> Repository:
        logger.debug("Registering remote store %s", url)
        self._repositories[url] = store
        return store

    def create_repository(self, url: str) -> Repository:
        """Register and return an empty bare store for ``url``."""
        return self.register(url, Repository.bare())

    def lookup(self, url: str) -> Optional[Repository]:
        return self._repositories.get(url)

    def exists(self, url: str) -> bool:
        return url in self._repositories

    def unregister(self, url: str) -> bool:
        return self._repositories.pop(url, None) is not None

    def urls(self) -> List[str]:
        return list(self._repositories)

    def clear(self) -> None:
        self._repositories.clear()

    # Pull requests

    def store_pull_request(self, pull_request: PullRequest) -> None:
        self._pull_requests[pull_request.id] = pull_request

    def get_pull_request(self, pr_id: str) -> Optional[PullRequest]:
        return self._pull_requests.get(pr_id)

    def list_pull_requests(self) -> List[PullRequest]:
        return sorted(self._pull_requests.values(), key=lambda pr: pr.created_at)

    def clear_pull_requests(self) -> None:
        self._pull_requests.clear()

    # Persistence

    def to_snapshot(self) -> NetworkSnapshot:
        return NetworkSnapshot(
            repositories={url: store.to_snapshot() for url, store in self._repositories.items()},
            pull_requests=[pr.model_copy() for pr in self._pull_requests.values()],
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_snapshot().to_dict(), indent=indent)

    @classmethod
    def from_snapshot(cls, snapshot: NetworkSnapshot) -> "RemoteNetwork":
        network = cls()
        for url, repo_snapshot in snapshot.repositories.items():
            network.register(url, Repository.from_snapshot(repo_snapshot))
        for pull_request in snapshot.pull_requests:
            network.store_pull_request(pull_request.model_copy())
        return network

    @classmethod
    def from_json(cls, text: str) -> "RemoteNetwork":
        try:
            snapshot = NetworkSnapshot.model_validate_json(text)
        except ValidationError as e:
            raise SnapshotError(f"Invalid network snapshot: {e}") from e
        return cls.from_snapshot(snapshot)
