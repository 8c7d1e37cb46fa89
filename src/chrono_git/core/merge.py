"""Merge algorithms: fast-forward detection and three-way merge."""

import logging
from collections import deque
from typing import List, Optional, Set

from pydantic import BaseModel, Field

from chrono_git.core.repository import Repository
from chrono_git.models import Commit, FileEntry, Tree, copy_tree

logger = logging.getLogger(__name__)


class MergeConflict(BaseModel):
    """A path changed differently on both sides."""

    file_path: str


class MergeResult(BaseModel):
    """Outcome of a three-way merge."""

    success: bool
    merged_tree: Tree = Field(default_factory=dict)
    conflicts: List[MergeConflict] = Field(default_factory=list)
    message: str = ""
    ancestor_hash: Optional[str] = None


def conflict_content(ours: str, theirs: str, label: str) -> str:
    """Render a conflicted file with Git's marker layout."""
    return f"<<<<<<< HEAD\n{ours}\n=======\n{theirs}\n>>>>>>> {label}\n"


class MergeEngine:
    """Stateless merge operations over a ``Repository``."""

    def can_fast_forward(self, repo: Repository, target_hash: str) -> bool:
        """True if the current commit lies on ``target_hash``'s first-parent chain."""
        current = repo.get_current_commit()
        if current is None:
            return False
        return any(c.hash == current.hash for c in repo.first_parent_history(target_hash))

    def perform_fast_forward(self, repo: Repository, target_hash: str) -> None:
        target = repo.get_commit(target_hash)
        if target is None:
            raise ValueError(f"Unknown commit {target_hash}")
        repo.move_current_to(target_hash)
        repo.working_directory = copy_tree(target.tree)
        repo.staging_area = {}
        logger.debug("Fast-forwarded to %s", target.short_hash)

    def ancestors(self, repo: Repository, start_hash: str) -> List[str]:
        """Breadth-first list of ``start_hash`` and every ancestor, following all parents."""
        order: List[str] = []
        seen: Set[str] = set()
        queue = deque([start_hash])
        while queue:
            commit_hash = queue.popleft()
            if commit_hash in seen:
                continue
            seen.add(commit_hash)
            order.append(commit_hash)
            commit = repo.get_commit(commit_hash)
            if commit is not None:
                queue.extend(commit.get_parents())
        return order

    def find_common_ancestor(self, repo: Repository, hash_a: str, hash_b: str) -> Optional[str]:
        """Return the first of ``hash_b``'s ancestors (BFS order) that is also an ancestor of ``hash_a``.

        When several common ancestors exist this is not necessarily the best
        merge base; the first one reached wins.
        """
        ancestors_a = set(self.ancestors(repo, hash_a))
        for commit_hash in self.ancestors(repo, hash_b):
            if commit_hash in ancestors_a:
                return commit_hash
        return None

    def perform_three_way_merge(
        self,
        repo: Repository,
        current: Commit,
        target: Commit,
        label: Optional[str] = None,
    ) -> MergeResult:
        """Combine ``current`` and ``target`` relative to their common ancestor.

        The repository itself is not modified; callers decide what to do with
        the merged tree.
        """
        label = label or target.short_hash
        ancestor_hash = self.find_common_ancestor(repo, current.hash, target.hash)
        ancestor = repo.get_commit(ancestor_hash) if ancestor_hash else None
        base_tree: Tree = ancestor.tree if ancestor is not None else {}

        merged: Tree = {}
        conflicts: List[MergeConflict] = []
        paths = sorted(set(base_tree) | set(current.tree) | set(target.tree))

        for path in paths:
            base = _content(base_tree, path)
            ours = _content(current.tree, path)
            theirs = _content(target.tree, path)

            if ours == theirs:
                resolved = ours
            elif ours == base:
                resolved = theirs
            elif theirs == base:
                resolved = ours
            else:
                conflicts.append(MergeConflict(file_path=path))
                merged[path] = FileEntry(
                    content=conflict_content(ours or "", theirs or "", label),
                    modified=True,
                )
                continue

            if resolved is not None:
                source = current.tree.get(path) if resolved == ours else target.tree.get(path)
                merged[path] = source.model_copy() if source is not None else FileEntry(content=resolved)

        if conflicts:
            paths_text = ", ".join(c.file_path for c in conflicts)
            message = f"Automatic merge failed; fix conflicts and then commit the result. ({paths_text})"
        else:
            message = "Merge completed without conflicts"

        logger.debug(
            "Three-way merge %s + %s (base %s): %d conflict(s)",
            current.short_hash,
            target.short_hash,
            ancestor_hash[:7] if ancestor_hash else "none",
            len(conflicts),
        )
        return MergeResult(
            success=not conflicts,
            merged_tree=merged,
            conflicts=conflicts,
            message=message,
            ancestor_hash=ancestor_hash,
        )


def _content(tree: Tree, path: str) -> Optional[str]:
    entry = tree.get(path)
    return entry.content if entry is not None else None
