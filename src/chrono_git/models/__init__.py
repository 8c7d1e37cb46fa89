"""Data models for Chrono Git."""

from .branch import Branch
from .commit import Commit
from .pull_request import PullRequest, PullRequestStatus
from .remote import RemoteBranchRef, RemoteMirror
from .result import GitResult
from .snapshot import NetworkSnapshot, RepositorySnapshot
from .tree import FileEntry, Tree, copy_tree

__all__ = [
    "Branch",
    "Commit",
    "FileEntry",
    "GitResult",
    "NetworkSnapshot",
    "PullRequest",
    "PullRequestStatus",
    "RemoteBranchRef",
    "RemoteMirror",
    "RepositorySnapshot",
    "Tree",
    "copy_tree",
]
