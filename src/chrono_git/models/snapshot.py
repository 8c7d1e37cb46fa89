"""Serializable snapshots of repositories and of the simulated network."""

from typing import Dict, List

from pydantic import Field

from .base import CamelModel
from .branch import Branch
from .commit import Commit
from .pull_request import PullRequest
from .remote import RemoteMirror
from .tree import FileEntry


class RepositorySnapshot(CamelModel):
    """Plain, JSON-ready form of a ``Repository``."""

    working_directory: Dict[str, FileEntry] = Field(default_factory=dict)
    staging_area: Dict[str, FileEntry] = Field(default_factory=dict)
    commits: List[Commit] = Field(default_factory=list)
    branches: List[Branch] = Field(default_factory=list)
    head: str = "main"
    remotes: List[RemoteMirror] = Field(default_factory=list)


class NetworkSnapshot(CamelModel):
    """Every remote store keyed by URL plus the pull request store."""

    repositories: Dict[str, RepositorySnapshot] = Field(default_factory=dict)
    pull_requests: List[PullRequest] = Field(default_factory=list)
