"""Git command semantics over one in-memory repository."""

import logging
import re
from datetime import datetime, timezone
from typing import Callable, List, Optional

from chrono_git.core.config import EngineSettings
from chrono_git.core.merge import MergeEngine, MergeResult
from chrono_git.core.network import RemoteNetwork
from chrono_git.core.repository import Repository
from chrono_git.models import (
    Branch,
    Commit,
    FileEntry,
    GitResult,
    PullRequest,
    PullRequestStatus,
    copy_tree,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_INVALID_BRANCH_RE = re.compile(r"[\s~^:?*\[\\]|\.\.|@\{|//")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_branch_name(name: str) -> bool:
    """Approximation of ``git check-ref-format --branch``."""
    if not name or name == "HEAD" or name.startswith(("-", "/", ".")):
        return False
    if name.endswith(("/", ".", ".lock")):
        return False
    return _INVALID_BRANCH_RE.search(name) is None


def repository_name_from_url(url: str) -> str:
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return name[:-4] if name.endswith(".git") else name


class GitEngine:
    """Implements every supported command against a single ``Repository``.

    Remote operations go through ``network``; engines that share a network
    see each other's pushes, forks and pull requests.
    """

    def __init__(
        self,
        repository: Optional[Repository] = None,
        network: Optional[RemoteNetwork] = None,
        settings: Optional[EngineSettings] = None,
        clock: Optional[Clock] = None,
    ):
        self.settings = settings or EngineSettings()
        self.repository = repository or Repository.create(
            default_branch=self.settings.default_branch
        )
        self.network = network if network is not None else RemoteNetwork()
        self.merge_engine = MergeEngine()
        self.clock: Clock = clock or utc_now

    def get_repository(self) -> Repository:
        return self.repository

    def set_repository(self, repository: Repository) -> None:
        self.repository = repository

    # Working directory editing

    def create_file(self, file_path: str, content: str = "") -> GitResult:
        if file_path in self.repository.working_directory:
            return GitResult.fail(f"File '{file_path}' already exists", "File already exists")
        self.repository.working_directory[file_path] = FileEntry(content=content, modified=True)
        return GitResult.ok(f"Created file '{file_path}'")

    def modify_file(self, file_path: str, content: str) -> GitResult:
        self.repository.working_directory[file_path] = FileEntry(content=content, modified=True)
        return GitResult.ok(f"Modified file '{file_path}'")

    def delete_file(self, file_path: str) -> GitResult:
        if file_path not in self.repository.working_directory:
            return GitResult.fail(f"File '{file_path}' not found", "File not found")
        del self.repository.working_directory[file_path]
        return GitResult.ok(f"Deleted file '{file_path}'")

    # Staging

    def add(self, file_path: str) -> GitResult:
        """git add <file>"""
        entry = self.repository.working_directory.get(file_path)
        if entry is None:
            return GitResult.fail(
                f"fatal: pathspec '{file_path}' did not match any files",
                f"File '{file_path}' not found in working directory",
            )
        self.repository.staging_area[file_path] = entry.model_copy()
        return GitResult.ok(f"Added '{file_path}' to staging area")

    def add_paths(self, file_paths: List[str]) -> GitResult:
        """git add <file>... ; nothing is staged unless every path exists."""
        for file_path in file_paths:
            if file_path not in self.repository.working_directory:
                return self.add(file_path)
        for file_path in file_paths:
            self.add(file_path)
        return GitResult.ok(f"Added {len(file_paths)} file(s) to staging area")

    def stage_tracked(self) -> int:
        """Prepare the index for ``commit -a``; return how many tracked files changed.

        A commit records the index as a whole, so once anything is to be
        committed every tracked file still in the working directory is staged.
        Tracked files removed from the working directory drop out of the tree.
        """
        repo = self.repository
        current = repo.get_current_commit()
        if current is None:
            return 0
        changed = 0
        for file_path, committed in current.tree.items():
            entry = repo.working_directory.get(file_path)
            if entry is None or entry.content != committed.content:
                changed += 1
        if changed or repo.staging_area:
            for file_path in current.tree:
                entry = repo.working_directory.get(file_path)
                if entry is not None and file_path not in repo.staging_area:
                    repo.staging_area[file_path] = entry.model_copy()
        return changed

    def add_all(self) -> GitResult:
        """git add ."""
        files = list(self.repository.working_directory)
        if not files:
            return GitResult.ok("No files to add")
        for file_path in files:
            self.repository.staging_area[file_path] = self.repository.working_directory[
                file_path
            ].model_copy()
        return GitResult.ok(f"Added {len(files)} file(s) to staging area")

    def status(self) -> GitResult:
        """git status"""
        repo = self.repository
        current = repo.get_current_commit()
        last_tree = current.tree if current is not None else {}

        lines: List[str] = []
        if repo.is_detached_head():
            lines.append(f"HEAD detached at {repo.head[:7]}")
        else:
            lines.append(f"On branch {repo.head}")
        if current is None:
            lines += ["", "No commits yet"]

        staged = list(repo.staging_area)
        modified: List[str] = []
        untracked: List[str] = []
        for file_path, entry in repo.working_directory.items():
            if file_path in repo.staging_area:
                continue
            committed = last_tree.get(file_path)
            if committed is None:
                untracked.append(file_path)
            elif committed.content != entry.content:
                modified.append(file_path)

        if staged:
            lines += ["", "Changes to be committed:", '  (use "git reset HEAD <file>..." to unstage)', ""]
            for file_path in staged:
                kind = "modified" if file_path in last_tree else "new file"
                lines.append(f"\t{kind}:   {file_path}")

        if modified:
            lines += [
                "",
                "Changes not staged for commit:",
                '  (use "git add <file>..." to update what will be committed)',
                '  (use "git checkout -- <file>..." to discard changes in working directory)',
                "",
            ]
            lines += [f"\tmodified:   {file_path}" for file_path in modified]

        if untracked:
            lines += [
                "",
                "Untracked files:",
                '  (use "git add <file>..." to include in what will be committed)',
                "",
            ]
            lines += [f"\t{file_path}" for file_path in untracked]

        if not (staged or modified or untracked):
            lines += ["", "nothing to commit, working tree clean"]
        elif not staged:
            lines += ["", 'no changes added to commit (use "git add" and/or "git commit -a")']

        return GitResult.ok("Status retrieved", "\n".join(lines) + "\n")

    # History

    def commit(
        self, message: str, author: Optional[str] = None, all_tracked: bool = False
    ) -> GitResult:
        """git commit [-a] -m <message>"""
        repo = self.repository
        if all_tracked and message and message.strip():
            self.stage_tracked()
        if not repo.staging_area:
            return GitResult.fail(
                "nothing to commit, working tree clean", "No changes staged for commit"
            )
        if not message or not message.strip():
            return GitResult.fail(
                "Aborting commit due to empty commit message.", "Commit message cannot be empty"
            )

        current = repo.get_current_commit()
        tree = copy_tree(repo.staging_area)
        staged_count = len(repo.staging_area)

        new_commit = Commit.create(
            message,
            author or self.settings.default_author,
            tree,
            parent=current.hash if current is not None else None,
            timestamp=self.clock(),
        )
        repo.add_commit(new_commit)
        repo.move_current_to(new_commit.hash)

        repo.working_directory = copy_tree(tree)
        repo.staging_area = {}
        logger.debug("Created commit %s on %s", new_commit.short_hash, repo.head)

        label = repo.head if not repo.is_detached_head() else "detached HEAD"
        root = " (root-commit)" if current is None else ""
        output = f"[{label}{root} {new_commit.short_hash}] {message}\n {staged_count} file(s) changed"
        return GitResult.ok("Commit created successfully", output)

    def log(self, oneline: bool = False, max_count: Optional[int] = None) -> GitResult:
        """git log [--oneline] [-n <count>]"""
        current = self.repository.get_current_commit()
        if current is None:
            return GitResult.fail(
                "fatal: your current branch does not have any commits yet",
                "No commits in repository",
            )

        history = self.repository.first_parent_history(current.hash)
        if max_count is not None:
            history = history[: max(max_count, 0)]

        entries = [c.format(oneline=oneline) for c in history]
        return GitResult.ok("Log retrieved", "\n".join(entries))

    def log_oneline(self, max_count: Optional[int] = None) -> GitResult:
        return self.log(oneline=True, max_count=max_count)

    # Branches

    def branch(self, branch_name: Optional[str] = None) -> GitResult:
        """git branch [<name>]"""
        repo = self.repository
        if not branch_name:
            branches = sorted(repo.get_branches_list(), key=lambda b: b.name)
            if not branches:
                return GitResult.fail("No branches found", "Repository has no branches")
            output = "".join(
                f"{'* ' if b.name == repo.head else '  '}{b.name}\n" for b in branches
            )
            return GitResult.ok("Branches listed", output)

        if not is_valid_branch_name(branch_name):
            return GitResult.fail(
                f"fatal: '{branch_name}' is not a valid branch name.",
                f"Invalid branch name '{branch_name}'",
            )
        if repo.get_branch(branch_name) is not None:
            return GitResult.fail(
                f"fatal: A branch named '{branch_name}' already exists.",
                f"Branch '{branch_name}' already exists",
            )
        current = repo.get_current_commit()
        if current is None:
            return GitResult.fail(
                "fatal: Not a valid object name: 'HEAD'.",
                "Cannot create branch without any commits",
            )

        repo.add_branch(Branch(name=branch_name, commit_hash=current.hash))
        logger.debug("Created branch %s at %s", branch_name, current.short_hash)
        return GitResult.ok(f"Branch '{branch_name}' created")

    def checkout(self, target: str, create_branch: bool = False) -> GitResult:
        """git checkout <branch|commit> / git checkout -b <new-branch>"""
        repo = self.repository

        if not create_branch and target == "HEAD":
            if repo.is_detached_head():
                current = repo.get_current_commit()
                summary = f"HEAD is now at {current.short_hash} {current.message}"
                return GitResult.ok(summary, summary)
            target = repo.head

        if not create_branch and target == repo.head and not repo.is_detached_head():
            return GitResult.ok(f"Already on '{target}'", f"Already on '{target}'")

        if repo.staging_area:
            return GitResult.fail(
                "error: Your local changes to the following files would be overwritten by checkout:\n"
                + "".join(f"\t{p}\n" for p in repo.staging_area)
                + "Please commit your changes or stash them before you switch branches.",
                "Uncommitted changes in staging area",
            )

        if create_branch:
            created = self.branch(target)
            if not created.success:
                return created

        target_branch = repo.get_branch(target)
        if target_branch is not None:
            repo.update_head(target)
            tip = repo.get_commit(target_branch.commit_hash)
            repo.working_directory = copy_tree(tip.tree) if tip is not None else {}
            output = (
                f"Switched to a new branch '{target}'"
                if create_branch
                else f"Switched to branch '{target}'"
            )
            return GitResult.ok(output, output)

        target_commit = repo.resolve_commit(target)
        if target_commit is not None:
            repo.update_head(target_commit.hash)
            repo.working_directory = copy_tree(target_commit.tree)
            summary = f"HEAD is now at {target_commit.short_hash} {target_commit.message}"
            output = (
                f"Note: switching to '{target}'.\n\n"
                "You are in 'detached HEAD' state. You can look around, make experimental\n"
                "changes and commit them, and you can discard any commits you make in this\n"
                "state without impacting any branches by switching back to a branch.\n\n"
                f"{summary}"
            )
            return GitResult.ok(summary, output)

        return GitResult.fail(
            f"error: pathspec '{target}' did not match any file(s) known to git",
            f"Branch or commit '{target}' not found",
        )

    def checkout_file(self, file_path: str) -> GitResult:
        """git checkout -- <file>"""
        current = self.repository.get_current_commit()
        if current is None:
            return GitResult.fail("fatal: No commits yet", "Cannot checkout file without commits")

        entry = current.tree.get(file_path)
        if entry is None:
            return GitResult.fail(
                f"error: pathspec '{file_path}' did not match any file(s) known to git",
                f"File '{file_path}' not found in HEAD",
            )
        self.repository.working_directory[file_path] = entry.model_copy()
        return GitResult.ok(f"Restored '{file_path}' from HEAD")

    # Merging

    def merge(self, branch_name: str) -> GitResult:
        """git merge <branch>"""
        repo = self.repository
        current_branch = repo.get_current_branch()
        if current_branch is None:
            return GitResult.fail(
                "fatal: You are not currently on a branch.",
                "Cannot merge in detached HEAD state",
            )

        target_branch = repo.get_branch(branch_name)
        if target_branch is None:
            return GitResult.fail(
                f"merge: {branch_name} - not something we can merge",
                f"Branch '{branch_name}' does not exist",
            )
        if current_branch.name == branch_name:
            return GitResult.fail(f"Already on '{branch_name}'", "Cannot merge branch into itself")
        if repo.staging_area:
            return GitResult.fail(
                "error: You have not concluded your merge (MERGE_HEAD exists).\n"
                "Please, commit your changes before you merge.",
                "Uncommitted changes in staging area",
            )

        current = repo.get_current_commit()
        if current is None:
            return GitResult.fail("fatal: No commits yet", "Cannot merge without commits")
        target = repo.get_commit(target_branch.commit_hash)
        if target is None:
            return GitResult.fail(
                f"fatal: Commit not found for branch '{branch_name}'", "Target branch has no commits"
            )

        return self._integrate(
            current,
            target,
            label=branch_name,
            merge_message=f"Merge branch '{branch_name}' into {current_branch.name}",
            success_message="Merge completed successfully",
        )

    def _integrate(
        self,
        current: Commit,
        target: Commit,
        label: str,
        merge_message: str,
        success_message: str,
    ) -> GitResult:
        """Bring ``target`` into the current line of history (shared by merge and pull)."""
        repo = self.repository

        if current.hash == target.hash or target.hash in self.merge_engine.ancestors(repo, current.hash):
            return GitResult.ok("Already up to date.", "Already up to date.")

        if self.merge_engine.can_fast_forward(repo, target.hash):
            self.merge_engine.perform_fast_forward(repo, target.hash)
            return GitResult.ok(
                "Fast-forward merge completed",
                f"Updating {current.short_hash}..{target.short_hash}\nFast-forward",
            )

        result = self.merge_engine.perform_three_way_merge(repo, current, target, label)
        if not result.success:
            return self._report_conflicts(result)

        merge_commit = Commit.create(
            merge_message,
            self.settings.default_author,
            result.merged_tree,
            parent=current.hash,
            parents=[current.hash, target.hash],
            timestamp=self.clock(),
        )
        repo.add_commit(merge_commit)
        repo.move_current_to(merge_commit.hash)
        repo.working_directory = copy_tree(result.merged_tree)
        repo.staging_area = {}
        logger.debug("Created merge commit %s", merge_commit.short_hash)
        return GitResult.ok(success_message, "Merge made by the 'recursive' strategy.")

    def _report_conflicts(self, result: MergeResult) -> GitResult:
        """Leave the conflict-marked tree in the working directory and the index."""
        repo = self.repository
        repo.working_directory = copy_tree(result.merged_tree)
        repo.staging_area = copy_tree(result.merged_tree)

        lines = []
        for conflict in result.conflicts:
            lines.append(f"Auto-merging {conflict.file_path}")
            lines.append(f"CONFLICT (content): Merge conflict in {conflict.file_path}")
        lines.append("Automatic merge failed; fix conflicts and then commit the result.")
        logger.debug("Merge stopped with %d conflict(s)", len(result.conflicts))
        return GitResult.fail(
            result.message or "Merge conflicts detected",
            "Merge conflicts must be resolved",
            output="\n".join(lines),
        )

    def reset(
        self, target: Optional[str] = None, mode: str = "mixed", file_path: Optional[str] = None
    ) -> GitResult:
        """git reset HEAD <file> / git reset --hard <commit>"""
        repo = self.repository

        if target == "HEAD" and file_path:
            if file_path not in repo.staging_area:
                return GitResult.fail(
                    f"fatal: pathspec '{file_path}' did not match any files",
                    f"File '{file_path}' is not staged",
                )
            del repo.staging_area[file_path]
            return GitResult.ok(
                f"Unstaged changes for '{file_path}'",
                f"Unstaged changes after reset:\nM\t{file_path}",
            )

        if mode == "hard" and target:
            target_commit = repo.resolve_commit(target)
            if target_commit is None:
                return GitResult.fail(
                    f"fatal: ambiguous argument '{target}': unknown revision or path not in the working tree.",
                    f"Commit or branch '{target}' not found",
                )
            repo.move_current_to(target_commit.hash)
            repo.working_directory = copy_tree(target_commit.tree)
            repo.staging_area = {}
            summary = f"HEAD is now at {target_commit.short_hash} {target_commit.message}"
            return GitResult.ok(summary, summary)

        return GitResult.fail("fatal: Invalid reset command", "Invalid reset parameters")

    # Remotes

    def remote_add(self, name: str, url: str) -> GitResult:
        """git remote add <name> <url>"""
        if self.repository.get_remote(name) is not None:
            return GitResult.fail(
                f"error: remote {name} already exists.", f"Remote '{name}' already exists"
            )
        self.repository.add_remote(name, url)
        return GitResult.ok(f"Remote '{name}' added")

    def remote_remove(self, name: str) -> GitResult:
        """git remote remove <name>"""
        if not self.repository.remove_remote(name):
            return GitResult.fail(f"error: No such remote: '{name}'", f"Remote '{name}' not found")
        return GitResult.ok(f"Remote '{name}' removed")

    def remote_list(self) -> GitResult:
        """git remote -v"""
        lines = []
        for remote in self.repository.remotes:
            lines.append(f"{remote.name}\t{remote.url} (fetch)")
            lines.append(f"{remote.name}\t{remote.url} (push)")
        return GitResult.ok("Remotes listed", "\n".join(lines))

    def clone(self, url: str) -> GitResult:
        """git clone <url>"""
        store = self.network.lookup(url)
        if store is None:
            return GitResult.fail(
                f"fatal: repository '{url}' does not exist", f"Repository '{url}' does not exist"
            )

        repo = self.repository
        repo.commits = dict(store.commits)
        repo.branches = {name: b.model_copy() for name, b in store.branches.items()}

        head = next((b.name for b in repo.get_branches_list() if b.is_default), None)
        if head is None:
            head = next(iter(repo.branches), None)
        if head is None:
            head = self.settings.default_branch
            repo.add_branch(Branch(name=head, commit_hash=""))
        repo.update_head(head)

        tip = repo.get_current_commit()
        repo.working_directory = copy_tree(tip.tree) if tip is not None else {}
        repo.staging_area = {}

        repo.remove_remote("origin")
        origin = repo.add_remote("origin", url)
        origin.branches = store.branch_refs()

        name = repository_name_from_url(url)
        output = f"Cloning into '{name}'...\n"
        if tip is None:
            output += "warning: You appear to have cloned an empty repository.\n"
        output += "done."
        logger.debug("Cloned %s (%d commits)", url, len(repo.commits))
        return GitResult.ok(f"Cloned '{url}' into '{name}'", output)

    def _resolve_remote_store(self, remote_name: str):
        """Return ``(mirror, store, failure)`` for a configured remote."""
        mirror = self.repository.get_remote(remote_name)
        if mirror is None:
            return None, None, GitResult.fail(
                f"fatal: '{remote_name}' does not appear to be a git repository",
                f"Remote '{remote_name}' not found",
            )
        store = self.network.lookup(mirror.url)
        if store is None:
            return mirror, None, GitResult.fail(
                f"fatal: repository '{mirror.url}' not found",
                f"Remote repository '{mirror.url}' not found",
            )
        return mirror, store, None

    def push(self, remote_name: str, branch_name: str) -> GitResult:
        """git push <remote> <branch>"""
        repo = self.repository
        mirror = repo.get_remote(remote_name)
        if mirror is None:
            return GitResult.fail(
                f"fatal: '{remote_name}' does not appear to be a git repository",
                f"Remote '{remote_name}' not found",
            )
        local_branch = repo.get_branch(branch_name)
        if local_branch is None or local_branch.is_unborn:
            return GitResult.fail(
                f"error: src refspec {branch_name} does not match any",
                f"Branch '{branch_name}' not found",
            )
        mirror, store, failure = self._resolve_remote_store(remote_name)
        if failure is not None:
            return failure

        local_tip = local_branch.commit_hash
        remote_branch = store.get_branch(branch_name)
        old_tip = remote_branch.commit_hash if remote_branch is not None else ""

        if old_tip == local_tip:
            mirror.branches = store.branch_refs()
            return GitResult.ok("Push completed", "Everything up-to-date")

        if old_tip and old_tip not in self.merge_engine.ancestors(repo, local_tip):
            return GitResult.fail(
                f"To {mirror.url}\n ! [rejected]        {branch_name} -> {branch_name} (fetch first)\n"
                f"error: failed to push some refs to '{mirror.url}'\n"
                "hint: Updates were rejected because the remote contains work that you do\n"
                "hint: not have locally. Integrate the remote changes (e.g. 'git pull ...')\n"
                "hint: before pushing again.",
                "Remote contains commits not present locally",
            )

        missing = [
            c for c in repo.first_parent_history(local_tip) if store.get_commit(c.hash) is None
        ]
        for commit in reversed(missing):
            store.add_commit(commit)
        store.update_branch(branch_name, local_tip)
        if not store.head:
            store.update_head(branch_name)
        mirror.branches = store.branch_refs()
        logger.debug("Pushed %d commit(s) to %s/%s", len(missing), remote_name, branch_name)

        if old_tip:
            ref_line = f"   {old_tip[:7]}..{local_tip[:7]}  {branch_name} -> {branch_name}"
        else:
            ref_line = f" * [new branch]      {branch_name} -> {branch_name}"
        return GitResult.ok("Push completed", f"To {mirror.url}\n{ref_line}")

    def fetch(self, remote_name: str) -> GitResult:
        """git fetch <remote>"""
        mirror, store, failure = self._resolve_remote_store(remote_name)
        if failure is not None:
            return failure

        repo = self.repository
        new_commits = [c for c in store.get_commits_list() if repo.get_commit(c.hash) is None]
        for commit in new_commits:
            repo.add_commit(commit)
        mirror.branches = store.branch_refs()
        logger.debug("Fetched %d commit(s) from %s", len(new_commits), remote_name)

        lines = [f"From {mirror.url}"]
        lines += [
            f" * [updated]         {ref.name:<10} -> {remote_name}/{ref.name}"
            for ref in mirror.branches
            if ref.commit_hash
        ]
        return GitResult.ok(
            f"Fetched {len(new_commits)} new commit(s) from '{remote_name}'", "\n".join(lines)
        )

    def pull(self, remote_name: str, branch_name: str) -> GitResult:
        """git pull <remote> <branch>"""
        fetched = self.fetch(remote_name)
        if not fetched.success:
            return fetched

        repo = self.repository
        mirror = repo.get_remote(remote_name)
        remote_ref = mirror.get_branch(branch_name) if mirror is not None else None
        if remote_ref is None or not remote_ref.commit_hash:
            return GitResult.fail(
                f"fatal: couldn't find remote ref {branch_name}",
                f"Remote branch '{branch_name}' not found",
            )
        remote_tip = repo.get_commit(remote_ref.commit_hash)
        if repo.staging_area:
            return GitResult.fail(
                "error: Your local changes to the following files would be overwritten by merge.\n"
                "Please commit your changes before you pull.",
                "Uncommitted changes in staging area",
            )

        current = repo.get_current_commit()
        if current is None:
            repo.move_current_to(remote_tip.hash)
            repo.working_directory = copy_tree(remote_tip.tree)
            repo.staging_area = {}
            return GitResult.ok("Pull completed", f"Updating to {remote_tip.short_hash}\nFast-forward")

        into = repo.head if not repo.is_detached_head() else "HEAD"
        return self._integrate(
            current,
            remote_tip,
            label=f"{remote_name}/{branch_name}",
            merge_message=f"Merge branch '{branch_name}' of {mirror.url} into {into}",
            success_message="Pull completed with merge commit",
        )

    def fork(self, source_url: str, fork_url: str, name: Optional[str] = None) -> GitResult:
        """Copy a hosted repository to a new URL."""
        source = self.network.lookup(source_url)
        if source is None:
            return GitResult.fail(
                f"fatal: repository '{source_url}' does not exist",
                f"Source repository '{source_url}' does not exist",
            )
        if self.network.exists(fork_url):
            return GitResult.fail(
                f"fatal: repository '{fork_url}' already exists",
                f"Repository '{fork_url}' already exists",
            )

        self.network.register(fork_url, source.copy())
        name = name or repository_name_from_url(fork_url)
        return GitResult.ok(
            f"Forked '{source_url}' to '{fork_url}'",
            f"Created fork '{name}' at {fork_url}",
        )

    # Pull requests

    def create_pull_request(
        self,
        title: str,
        description: str,
        source_url: str,
        source_branch: str,
        target_url: str,
        target_branch: str,
        author: Optional[str] = None,
    ) -> GitResult:
        if not title or not title.strip():
            return GitResult.fail("error: a pull request needs a title", "Pull request title cannot be empty")

        for role, url, branch in (
            ("Source", source_url, source_branch),
            ("Target", target_url, target_branch),
        ):
            store = self.network.lookup(url)
            if store is None:
                return GitResult.fail(
                    f"error: repository '{url}' not found",
                    f"{role} repository '{url}' does not exist",
                )
            if store.get_branch(branch) is None:
                return GitResult.fail(
                    f"error: branch '{branch}' not found in '{url}'",
                    f"{role} branch '{branch}' does not exist",
                )

        pull_request = PullRequest(
            title=title,
            description=description,
            source_url=source_url,
            source_branch=source_branch,
            target_url=target_url,
            target_branch=target_branch,
            author=author or self.settings.default_author,
            created_at=self.clock(),
        )
        self.network.store_pull_request(pull_request)
        output = (
            f"Pull Request #{pull_request.id}\n"
            f"Title: {title}\n"
            f"{source_url}:{source_branch} -> {target_url}:{target_branch}"
        )
        return GitResult.ok("Pull request created", output)

    def get_pull_request(self, pr_id: str) -> Optional[PullRequest]:
        return self.network.get_pull_request(pr_id)

    def list_pull_requests(self) -> GitResult:
        lines = [
            f"#{pr.id} [{pr.status.value}] {pr.title} ({pr.source_branch} -> {pr.target_branch})"
            for pr in self.network.list_pull_requests()
        ]
        return GitResult.ok("Pull requests listed", "\n".join(lines))

    def _open_pull_request(self, pr_id: str):
        pull_request = self.network.get_pull_request(pr_id)
        if pull_request is None:
            return None, GitResult.fail(
                f"error: pull request '{pr_id}' not found",
                f"Pull request '{pr_id}' does not exist",
            )
        if pull_request.status != PullRequestStatus.OPEN:
            return None, GitResult.fail(
                f"error: pull request '{pr_id}' is {pull_request.status.value}",
                f"Pull request '{pr_id}' is already {pull_request.status.value}",
            )
        return pull_request, None

    def merge_pull_request(self, pr_id: str) -> GitResult:
        """Merge an open pull request into its target repository."""
        pull_request, failure = self._open_pull_request(pr_id)
        if failure is not None:
            return failure

        source = self.network.lookup(pull_request.source_url)
        target = self.network.lookup(pull_request.target_url)
        if source is None or target is None:
            missing = pull_request.source_url if source is None else pull_request.target_url
            return GitResult.fail(
                f"error: repository '{missing}' not found", f"Repository '{missing}' does not exist"
            )
        source_branch = source.get_branch(pull_request.source_branch)
        if source_branch is None or source_branch.is_unborn:
            return GitResult.fail(
                f"error: branch '{pull_request.source_branch}' has no commits",
                f"Source branch '{pull_request.source_branch}' does not exist",
            )

        source_tip = source.get_commit(source_branch.commit_hash)
        history = source.first_parent_history(source_tip.hash)
        target_branch = target.get_branch(pull_request.target_branch)
        target_tip = (
            target.get_commit(target_branch.commit_hash) if target_branch is not None else None
        )

        merged_tree = copy_tree(source_tip.tree)
        if target_tip is not None:
            combined = Repository(commits=list(target.commits.values()) + history)
            if source_tip.hash in self.merge_engine.ancestors(combined, target_tip.hash):
                return GitResult.fail(
                    f"error: pull request '{pr_id}' has nothing to merge: "
                    f"{pull_request.target_branch} already contains {pull_request.source_branch}",
                    "Nothing to merge",
                )
            result = self.merge_engine.perform_three_way_merge(
                combined, target_tip, source_tip, pull_request.source_branch
            )
            if not result.success:
                paths = ", ".join(c.file_path for c in result.conflicts)
                return GitResult.fail(
                    f"error: pull request '{pr_id}' has conflicts that must be resolved: {paths}",
                    "Merge conflicts must be resolved",
                )
            merged_tree = result.merged_tree

        for commit in reversed(history):
            if target.get_commit(commit.hash) is None:
                target.add_commit(commit)

        if target_tip is None:
            new_tip = source_tip.hash
        else:
            merge_commit = Commit.create(
                f"Merge pull request #{pull_request.id} from {pull_request.source_branch}",
                self.settings.default_author,
                merged_tree,
                parent=target_tip.hash,
                parents=[target_tip.hash, source_tip.hash],
                timestamp=self.clock(),
            )
            target.add_commit(merge_commit)
            new_tip = merge_commit.hash
        target.update_branch(pull_request.target_branch, new_tip)

        pull_request.mark_merged(self.clock())
        logger.debug("Merged pull request %s into %s", pull_request.id, pull_request.target_url)
        return GitResult.ok(
            "Pull request merged",
            f"Merged pull request #{pull_request.id} into {pull_request.target_branch} ({new_tip[:7]})",
        )

    def close_pull_request(self, pr_id: str) -> GitResult:
        pull_request, failure = self._open_pull_request(pr_id)
        if failure is not None:
            return failure
        pull_request.close()
        return GitResult.ok("Pull request closed", f"Closed pull request #{pull_request.id}")
