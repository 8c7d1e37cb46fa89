"""Local mirror records of remote repositories."""

from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class RemoteBranchRef(CamelModel):
    """Last-known tip of a branch on a remote."""

    name: str
    commit_hash: str


class RemoteMirror(CamelModel):
    """What a local repository knows about one remote: name, URL and branch tips."""

    name: str
    url: str
    branches: List[RemoteBranchRef] = Field(default_factory=list)

    def get_branch(self, name: str) -> Optional[RemoteBranchRef]:
        return next((b for b in self.branches if b.name == name), None)
