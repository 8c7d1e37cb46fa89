"""In-memory repository state: working directory, index, commits, branches, HEAD."""

import json
import logging
import re
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from chrono_git.errors import SnapshotError
from chrono_git.models import (
    Branch,
    Commit,
    RemoteBranchRef,
    RemoteMirror,
    RepositorySnapshot,
    Tree,
    copy_tree,
)

logger = logging.getLogger(__name__)

MIN_ABBREV_LENGTH = 4
_REVISION_RE = re.compile(r"(.+?)((?:[~^]\d*)*)")
_REVISION_STEP_RE = re.compile(r"([~^])(\d*)")


class Repository:
    """The live, mutable unit of work that every command operates on.

    ``head`` is either a branch name (attached) or a commit hash (detached);
    it is detached exactly when it is not a key of ``branches``.
    """

    def __init__(
        self,
        working_directory: Optional[Tree] = None,
        staging_area: Optional[Tree] = None,
        commits: Iterable[Commit] = (),
        branches: Iterable[Branch] = (),
        head: str = "main",
        remotes: Optional[List[RemoteMirror]] = None,
    ):
        self.working_directory: Tree = working_directory if working_directory is not None else {}
        self.staging_area: Tree = staging_area if staging_area is not None else {}
        self.commits: Dict[str, Commit] = {c.hash: c for c in commits}
        self.branches: Dict[str, Branch] = {b.name: b for b in branches}
        self.head = head
        self.remotes: List[RemoteMirror] = remotes if remotes is not None else []

    @classmethod
    def create(cls, initial_files: Optional[Tree] = None, default_branch: str = "main") -> "Repository":
        """Create a fresh repository with an unborn default branch."""
        repo = cls(working_directory=copy_tree(initial_files or {}), head=default_branch)
        repo.add_branch(Branch(name=default_branch, commit_hash=""))
        return repo

    @classmethod
    def bare(cls) -> "Repository":
        """Create an empty store with no branches, as hosted on a remote."""
        return cls(head="")

    # HEAD and lookups

    def get_current_branch(self) -> Optional[Branch]:
        return self.branches.get(self.head)

    def get_current_commit(self) -> Optional[Commit]:
        branch = self.get_current_branch()
        if branch is not None:
            return self.commits.get(branch.commit_hash)
        return self.commits.get(self.head)

    def is_detached_head(self) -> bool:
        return self.head not in self.branches

    def get_commit(self, commit_hash: str) -> Optional[Commit]:
        return self.commits.get(commit_hash)

    def get_branch(self, name: str) -> Optional[Branch]:
        return self.branches.get(name)

    def get_commits_list(self) -> List[Commit]:
        return list(self.commits.values())

    def get_branches_list(self) -> List[Branch]:
        return list(self.branches.values())

    # Mutation

    def add_commit(self, commit: Commit) -> None:
        self.commits[commit.hash] = commit

    def add_branch(self, branch: Branch) -> None:
        self.branches[branch.name] = branch

    def update_branch(self, name: str, commit_hash: str) -> None:
        """Point ``name`` at ``commit_hash``, creating the branch if needed."""
        branch = self.branches.get(name)
        if branch is None:
            self.add_branch(Branch(name=name, commit_hash=commit_hash))
        else:
            branch.update_commit(commit_hash)

    def update_head(self, target: str) -> None:
        self.head = target

    def move_current_to(self, commit_hash: str) -> None:
        """Advance the current branch, or HEAD itself when detached."""
        branch = self.get_current_branch()
        if branch is not None:
            logger.debug("Moving branch %s to %s", branch.name, commit_hash[:7])
            branch.update_commit(commit_hash)
        else:
            logger.debug("Moving detached HEAD to %s", commit_hash[:7])
            self.update_head(commit_hash)

    # Remotes

    def get_remote(self, name: str) -> Optional[RemoteMirror]:
        return next((r for r in self.remotes if r.name == name), None)

    def add_remote(self, name: str, url: str) -> RemoteMirror:
        remote = RemoteMirror(name=name, url=url)
        self.remotes.append(remote)
        return remote

    def remove_remote(self, name: str) -> bool:
        remaining = [r for r in self.remotes if r.name != name]
        removed = len(remaining) != len(self.remotes)
        self.remotes = remaining
        return removed

    def branch_refs(self) -> List[RemoteBranchRef]:
        """Branch tips as they would be advertised to a client."""
        return [
            RemoteBranchRef(name=b.name, commit_hash=b.commit_hash)
            for b in self.branches.values()
        ]

    def resolve_commit(self, ref: str) -> Optional[Commit]:
        """Resolve a revision: ``HEAD``, a branch, a full or abbreviated hash.

        ``~N`` walks N first parents and ``^N`` picks the Nth parent, as in
        ``HEAD~2`` or ``feature^2``.
        """
        match = _REVISION_RE.fullmatch(ref)
        if match is None:
            return None
        base, suffix = match.group(1), match.group(2)

        if base == "HEAD":
            commit = self.get_current_commit()
        elif base in self.branches:
            commit = self.commits.get(self.branches[base].commit_hash)
        else:
            commit = self._lookup_hash(base)

        for op, count in _REVISION_STEP_RE.findall(suffix):
            if commit is None:
                return None
            n = int(count) if count else 1
            if op == "~":
                for _ in range(n):
                    commit = self.commits.get(commit.parent) if commit and commit.parent else None
            else:
                parents = commit.get_parents()
                commit = self.commits.get(parents[n - 1]) if 0 < n <= len(parents) else None
        return commit

    def _lookup_hash(self, prefix: str) -> Optional[Commit]:
        prefix = prefix.lower()
        if prefix in self.commits:
            return self.commits[prefix]
        if len(prefix) < MIN_ABBREV_LENGTH:
            return None
        matches = [h for h in self.commits if h.startswith(prefix)]
        return self.commits[matches[0]] if len(matches) == 1 else None

    # History

    def first_parent_history(self, start_hash: Optional[str]) -> List[Commit]:
        """Walk ``parent`` links from ``start_hash``, newest first."""
        history: List[Commit] = []
        current = start_hash
        while current:
            commit = self.commits.get(current)
            if commit is None:
                break
            history.append(commit)
            current = commit.parent
        return history

    def copy(self) -> "Repository":
        """Deep copy of the whole state (commits are immutable and shared)."""
        return Repository(
            working_directory=copy_tree(self.working_directory),
            staging_area=copy_tree(self.staging_area),
            commits=self.commits.values(),
            branches=[b.model_copy() for b in self.branches.values()],
            head=self.head,
            remotes=[r.model_copy(deep=True) for r in self.remotes],
        )

    # Snapshots

    def to_snapshot(self) -> RepositorySnapshot:
        return RepositorySnapshot(
            working_directory=copy_tree(self.working_directory),
            staging_area=copy_tree(self.staging_area),
            commits=self.get_commits_list(),
            branches=[b.model_copy() for b in self.branches.values()],
            head=self.head,
            remotes=[r.model_copy(deep=True) for r in self.remotes],
        )

    def to_dict(self) -> dict:
        """Serialize to the plain camelCase structure used by callers."""
        return self.to_snapshot().to_dict()

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_snapshot(cls, snapshot: RepositorySnapshot) -> "Repository":
        repo = cls(
            working_directory=copy_tree(snapshot.working_directory),
            staging_area=copy_tree(snapshot.staging_area),
            commits=snapshot.commits,
            branches=[b.model_copy() for b in snapshot.branches],
            head=snapshot.head,
            remotes=[r.model_copy(deep=True) for r in snapshot.remotes],
        )
        repo.check_integrity()
        return repo

    @classmethod
    def from_dict(cls, data: dict) -> "Repository":
        """Load a repository from its plain structure.

        Raises:
            SnapshotError: if the data is malformed or violates graph invariants.
        """
        try:
            snapshot = RepositorySnapshot.model_validate(data)
        except ValidationError as e:
            raise SnapshotError(f"Invalid repository snapshot: {e}") from e
        return cls.from_snapshot(snapshot)

    @classmethod
    def from_json(cls, text: str) -> "Repository":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Repository snapshot is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def check_integrity(self) -> None:
        """Raise ``SnapshotError`` if a branch tip dangles.

        Parent links are not checked: ``push`` only transfers first-parent
        history, so hosted stores may lack the second parent of a merge.
        """
        for branch in self.branches.values():
            if branch.commit_hash and branch.commit_hash not in self.commits:
                raise SnapshotError(
                    f"Branch '{branch.name}' points at unknown commit {branch.commit_hash}"
                )
