"""Tests for routing command lines through CommandExecutor."""

import pytest

from chrono_git.core.executor import CommandExecutor
from chrono_git.core.parser import CommandName
from chrono_git.errors import ExecutorConfigurationError
from helpers import hosted_repository

URL = "https://github.com/test/repo.git"
FORK_URL = "https://github.com/contributor/repo.git"


@pytest.fixture
def executor():
    return CommandExecutor()


def run(executor, engine, *lines):
    """Run each line, failing the test on the first unsuccessful one."""
    result = None
    for line in lines:
        result = executor.execute(engine, line)
        assert result.success, f"{line}: {result.message}"
    return result


class TestDispatch:
    def test_every_command_has_a_handler(self, executor):
        assert set(executor.handlers) == set(CommandName)

    def test_missing_handler_is_a_configuration_error(self, executor):
        del executor.handlers[CommandName.FORK]

        with pytest.raises(ExecutorConfigurationError, match="fork"):
            executor.check_handlers()

    def test_git_prefix_is_optional(self, executor, engine):
        assert executor.execute(engine, "git status").output == executor.execute(engine, "status").output

    def test_unknown_command_suggests_closest(self, executor, engine):
        result = executor.execute(engine, "git comit -m 'x'")

        assert not result.success
        assert "Did you mean 'commit'?" in result.message
        assert result.error == "Unknown command 'comit'"

    def test_unexpected_exception_becomes_failed_result(self, executor, engine, monkeypatch):
        def explode():
            raise RuntimeError("boom")

        monkeypatch.setattr(engine, "status", explode)

        result = executor.execute(engine, "git status")

        assert not result.success
        assert result.message == "Error executing command: boom"


class TestLocalCommands:
    def test_add_without_arguments(self, executor, engine):
        result = executor.execute(engine, "git add")

        assert not result.success
        assert result.message == "Nothing specified, nothing added.\nMaybe you wanted to say 'git add .'?"

    def test_add_dot_and_commit(self, executor, engine):
        run(executor, engine, "git add .", 'git commit -m "Initial commit"')

        commit = engine.get_repository().get_current_commit()
        assert commit.message == "Initial commit"
        assert set(commit.tree) == {"README.md", "index.js"}

    def test_add_several_files(self, executor, engine):
        run(executor, engine, "git add README.md index.js")

        assert set(engine.get_repository().staging_area) == {"README.md", "index.js"}

    def test_commit_without_message(self, executor, engine):
        executor.execute(engine, "git add .")

        result = executor.execute(engine, "git commit")

        assert not result.success
        assert result.message.startswith("Aborting commit due to empty commit message.")

    def test_commit_all_and_author(self, executor, committed_engine):
        committed_engine.modify_file("README.md", "# Edited")

        run(executor, committed_engine, 'git commit -am "Edit readme" --author "Ada Lovelace"')

        commit = committed_engine.get_repository().get_current_commit()
        assert commit.author == "Ada Lovelace"
        assert commit.tree["README.md"].content == "# Edited"

    def test_log_with_count(self, executor, committed_engine):
        committed_engine.modify_file("a.txt", "a")
        run(executor, committed_engine, "git add a.txt", "git commit -m Second")

        result = run(executor, committed_engine, "git log --oneline -n 1")

        assert result.output.endswith(" Second")
        assert len(result.output.splitlines()) == 1

    def test_log_with_bad_count(self, executor, committed_engine):
        result = executor.execute(committed_engine, "git log -n many")

        assert not result.success
        assert result.message == "fatal: 'many': not an integer"

    def test_branch_delete_is_unsupported(self, executor, committed_engine):
        result = executor.execute(committed_engine, "git branch -d main")

        assert not result.success
        assert result.error == "Branch deletion not supported"

    def test_branch_checkout_and_merge(self, executor, committed_engine):
        run(executor, committed_engine, "git checkout -b feature")
        committed_engine.modify_file("feature.txt", "feature")
        run(
            executor,
            committed_engine,
            "git add .",
            "git commit -m 'Add feature'",
            "git checkout main",
        )

        result = run(executor, committed_engine, "git merge feature")

        assert "Fast-forward" in result.output
        assert "* main" in run(executor, committed_engine, "git branch").output

    def test_checkout_without_target(self, executor, committed_engine):
        result = executor.execute(committed_engine, "git checkout")

        assert not result.success
        assert result.error == "No target specified"

    def test_checkout_file_after_separator(self, executor, committed_engine):
        committed_engine.modify_file("README.md", "# Oops")

        run(executor, committed_engine, "git checkout -- README.md")

        assert committed_engine.get_repository().working_directory["README.md"].content == "# Test Project"

    def test_checkout_separator_without_file(self, executor, committed_engine):
        result = executor.execute(committed_engine, "git checkout --")

        assert not result.success
        assert result.error == "No file specified"

    def test_merge_without_branch(self, executor, committed_engine):
        assert executor.execute(committed_engine, "git merge").error == "No branch specified"

    def test_reset_forms(self, executor, committed_engine):
        first = committed_engine.get_repository().get_current_commit()
        committed_engine.modify_file("a.txt", "a")
        run(executor, committed_engine, "git add a.txt", "git commit -m Second")
        committed_engine.modify_file("b.txt", "b")

        run(executor, committed_engine, "git add b.txt", "git reset HEAD b.txt")
        assert committed_engine.get_repository().staging_area == {}

        run(executor, committed_engine, "git reset --hard HEAD~1")
        assert committed_engine.get_repository().get_current_commit().hash == first.hash

    def test_reset_without_mode(self, executor, committed_engine):
        result = executor.execute(committed_engine, "git reset")

        assert not result.success
        assert result.message.startswith("Invalid reset command.\nUsage:")


class TestRemoteCommands:
    def test_remote_subcommands(self, executor, committed_engine):
        run(executor, committed_engine, f"git remote add origin {URL}")

        assert run(executor, committed_engine, "git remote -v").output.startswith(f"origin\t{URL}")
        run(executor, committed_engine, "git remote remove origin")
        assert committed_engine.get_repository().remotes == []

    def test_remote_unknown_subcommand(self, executor, committed_engine):
        result = executor.execute(committed_engine, "git remote rename a b")

        assert not result.success
        assert result.message == "error: Unknown subcommand: rename"

    def test_remote_add_requires_url(self, executor, committed_engine):
        assert not executor.execute(committed_engine, "git remote add origin").success

    def test_clone_commit_push(self, executor, network, empty_engine):
        store, _ = hosted_repository(network, URL, {"README.md": "# Repo"})

        run(executor, empty_engine, f"git clone {URL}")
        empty_engine.modify_file("notes.txt", "notes")
        run(
            executor,
            empty_engine,
            "git add .",
            "git commit -m 'Add notes'",
            "git push origin main",
        )

        assert store.get_branch("main").commit_hash == empty_engine.get_repository().get_current_commit().hash

    def test_push_requires_branch(self, executor, committed_engine):
        assert executor.execute(committed_engine, "git push origin").error == "Missing remote or branch name"

    def test_fetch_and_pull(self, executor, network, empty_engine):
        _, author = hosted_repository(network, URL, {"README.md": "# Repo"})
        run(executor, empty_engine, f"git clone {URL}")
        author.modify_file("CHANGELOG.md", "v2")
        run(executor, author, "git add .", "git commit -m v2", "git push origin main")

        assert "1 new commit" in run(executor, empty_engine, "git fetch origin").message
        run(executor, empty_engine, "git pull origin main")

        assert "CHANGELOG.md" in empty_engine.get_repository().working_directory

    def test_fork_and_pull_request_lifecycle(self, executor, network, empty_engine):
        hosted_repository(network, URL, {"README.md": "# Repo"})
        run(
            executor,
            empty_engine,
            f"fork {URL} {FORK_URL}",
            f"git clone {FORK_URL}",
            "git checkout -b feature",
        )
        empty_engine.modify_file("feature.txt", "feature")
        run(
            executor,
            empty_engine,
            "git add .",
            "git commit -m 'Add feature'",
            "git push origin feature",
            f'pr create {FORK_URL} feature {URL} main -t "Add feature" -d "Please merge"',
        )

        pull_request = network.list_pull_requests()[0]
        assert pull_request.description == "Please merge"
        assert pull_request.id in run(executor, empty_engine, "pr list").output

        run(executor, empty_engine, f"pr merge {pull_request.id}")
        assert "feature.txt" in network.lookup(URL).get_current_commit().tree

    def test_pr_create_requires_title(self, executor, committed_engine):
        result = executor.execute(committed_engine, f"pr create {FORK_URL} feature {URL} main")

        assert not result.success
        assert result.error == "Missing pull request arguments"

    def test_pr_merge_requires_id(self, executor, committed_engine):
        assert executor.execute(committed_engine, "pr merge").error == "Missing pull request id"
