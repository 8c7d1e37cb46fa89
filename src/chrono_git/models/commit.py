"""Commit model for the simulated object graph."""

import hashlib
import json
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ConfigDict

from .base import CamelModel
from .tree import Tree, copy_tree


class Commit(CamelModel):
    """An immutable snapshot of the repository plus metadata and lineage.

    ``parent`` is the first parent and is what first-parent walks (``log``,
    ``push``) follow. ``parents`` is only populated for merge commits; when it
    is empty ``parent`` is authoritative.
    """

    model_config = ConfigDict(frozen=True)

    hash: str
    message: str
    author: str
    timestamp: datetime
    parent: Optional[str] = None
    tree: Tree
    parents: Optional[List[str]] = None

    @property
    def short_hash(self) -> str:
        """First seven characters of the hash."""
        return self.hash[:7]

    @property
    def is_merge_commit(self) -> bool:
        return self.parents is not None and len(self.parents) > 1

    def get_parents(self) -> List[str]:
        """Return every parent hash, oldest lineage first."""
        if self.parents:
            return list(self.parents)
        return [self.parent] if self.parent else []

    @classmethod
    def create(
        cls,
        message: str,
        author: str,
        tree: Tree,
        parent: Optional[str] = None,
        parents: Optional[List[str]] = None,
        timestamp: Optional[datetime] = None,
    ) -> "Commit":
        """Create a commit, computing its hash from its content and lineage."""
        timestamp = timestamp or datetime.now(timezone.utc)
        tree = copy_tree(tree)
        commit_hash = cls.generate_hash(message, author, timestamp, tree, parent, parents)
        return cls(
            hash=commit_hash,
            message=message,
            author=author,
            timestamp=timestamp,
            parent=parent,
            tree=tree,
            parents=list(parents) if parents else None,
        )

    @staticmethod
    def generate_hash(
        message: str,
        author: str,
        timestamp: datetime,
        tree: Tree,
        parent: Optional[str],
        parents: Optional[List[str]] = None,
    ) -> str:
        """SHA-1 over a canonical rendering of the commit."""
        tree_content = json.dumps(
            {path: entry.model_dump() for path, entry in tree.items()},
            sort_keys=True,
        )
        parent_info = ",".join(parents) if parents else (parent or "root")
        content = (
            "commit\n"
            f"tree {tree_content}\n"
            f"parent {parent_info}\n"
            f"author {author}\n"
            f"date {timestamp.isoformat()}\n"
            "\n"
            f"{message}"
        )
        return hashlib.sha1(content.encode("utf-8")).hexdigest()  # noqa: S324

    def format(self, oneline: bool = False) -> str:
        """Render the commit the way ``git log`` does."""
        if oneline:
            return f"{self.short_hash} {self.message}"

        date = self.timestamp.astimezone(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")
        return (
            f"commit {self.hash}\n"
            f"Author: {self.author}\n"
            f"Date:   {date}\n"
            "\n"
            f"    {self.message}\n"
        )
