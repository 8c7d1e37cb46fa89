"""Branch model."""

from .base import CamelModel


class Branch(CamelModel):
    """A named, movable pointer to a commit.

    An empty ``commit_hash`` marks an unborn branch (no commits yet).
    """

    name: str
    commit_hash: str = ""

    def update_commit(self, commit_hash: str) -> None:
        self.commit_hash = commit_hash

    @property
    def is_default(self) -> bool:
        return self.name in ("main", "master")

    @property
    def is_unborn(self) -> bool:
        return not self.commit_hash
