"""Tests for the chrono-git command line."""

import pytest
from click.testing import CliRunner

from chrono_git import __version__
from chrono_git.cli.main import main

URL = "https://example.com/team/repo.git"


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, *args, **kwargs):
    return runner.invoke(main, list(args), **kwargs)


def test_version(runner):
    result = invoke(runner, "--version")

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_creates_workspace(runner):
    with runner.isolated_filesystem():
        result = invoke(runner, "init")

        assert result.exit_code == 0
        assert "Initialized empty Chrono Git repository" in result.output


def test_init_twice_needs_force(runner):
    with runner.isolated_filesystem():
        invoke(runner, "init")

        again = invoke(runner, "init")
        forced = invoke(runner, "init", "--force")

        assert again.exit_code != 0
        assert "already initialized" in again.output
        assert forced.exit_code == 0


def test_commands_require_workspace(runner):
    with runner.isolated_filesystem():
        result = invoke(runner, "run", "git", "status")

        assert result.exit_code != 0
        assert "not initialized" in result.output


def test_write_add_commit_log(runner):
    with runner.isolated_filesystem():
        invoke(runner, "init")
        assert invoke(runner, "write", "hello.txt", "hello world").exit_code == 0

        assert invoke(runner, "run", "git", "add", "hello.txt").exit_code == 0
        commit = invoke(runner, "run", "git", "commit", "-m", "First commit")
        log = invoke(runner, "run", "git", "log", "--oneline")

        assert commit.exit_code == 0
        assert "(root-commit)" in commit.output
        assert log.exit_code == 0
        assert "First commit" in log.output


def test_run_accepts_single_quoted_line(runner):
    with runner.isolated_filesystem():
        invoke(runner, "init")
        invoke(runner, "write", "a.txt", "a")

        invoke(runner, "run", "git add .")
        result = invoke(runner, "run", 'git commit -m "Quoted message"')

        assert result.exit_code == 0
        assert "Quoted message" in result.output


def test_failed_command_exits_non_zero(runner):
    with runner.isolated_filesystem():
        invoke(runner, "init")

        result = invoke(runner, "run", "git", "comit")

        assert result.exit_code == 1
        assert "Did you mean 'commit'?" in result.output


def test_write_from_file_and_rm(runner):
    with runner.isolated_filesystem():
        invoke(runner, "init")
        with open("source.txt", "w", encoding="utf-8") as f:
            f.write("from disk")

        assert invoke(runner, "write", "copy.txt", "--from-file", "source.txt").exit_code == 0
        status = invoke(runner, "run", "git", "status")
        assert "copy.txt" in status.output

        assert invoke(runner, "rm", "copy.txt").exit_code == 0
        assert invoke(runner, "rm", "copy.txt").exit_code == 1


def test_show(runner):
    with runner.isolated_filesystem():
        invoke(runner, "init")
        invoke(runner, "write", "a.txt", "a")
        invoke(runner, "run", "git add a.txt")
        invoke(runner, "run", "git commit -m Initial")

        result = invoke(runner, "show")

        assert result.exit_code == 0
        assert "HEAD: main" in result.output
        assert "Branches" in result.output
        assert "Initial" in result.output
        assert "a.txt" in result.output


def test_network_create_push_and_list(runner):
    with runner.isolated_filesystem():
        invoke(runner, "init")
        invoke(runner, "write", "a.txt", "a")
        invoke(runner, "run", "git add a.txt")
        invoke(runner, "run", "git commit -m Initial")

        assert invoke(runner, "network", "create", URL).exit_code == 0
        assert invoke(runner, "network", "create", URL).exit_code != 0
        invoke(runner, "run", f"git remote add origin {URL}")
        push = invoke(runner, "run", "git push origin main")
        listing = invoke(runner, "network", "list")

        assert push.exit_code == 0
        assert "[new branch]" in push.output
        assert URL in listing.output
        assert "main" in listing.output


def test_network_create_from_workspace(runner):
    with runner.isolated_filesystem():
        invoke(runner, "init")
        invoke(runner, "write", "a.txt", "a")
        invoke(runner, "run", "git add a.txt")
        invoke(runner, "run", "git commit -m Initial")

        created = invoke(runner, "network", "create", URL, "--from-workspace")
        listing = invoke(runner, "network", "list")
        clone = invoke(runner, "run", f"git clone {URL}")

        assert created.exit_code == 0
        assert "main" in listing.output
        assert clone.exit_code == 0
        assert "Cloning into 'repo'..." in clone.output


def test_shell_runs_commands_until_exit(runner):
    with runner.isolated_filesystem():
        invoke(runner, "init")

        result = invoke(runner, "shell", input="git status\nexit\n")

        assert result.exit_code == 0
        assert "On branch main" in result.output
