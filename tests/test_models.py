"""Tests for the value types."""

import re
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from chrono_git.errors import InvalidTransitionError
from chrono_git.models import Branch, Commit, GitResult, PullRequest, PullRequestStatus
from helpers import make_tree

WHEN = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def test_commit_hash_is_40_hex_chars():
    """Test that commit hashes look like SHA-1 digests."""
    commit = Commit.create("Initial", "Ada", make_tree({"a.txt": "a"}), timestamp=WHEN)

    assert re.fullmatch(r"[0-9a-f]{40}", commit.hash)
    assert commit.short_hash == commit.hash[:7]
    assert commit.hash.startswith(commit.short_hash)


def test_commit_hash_is_deterministic():
    """Identical inputs at the same timestamp yield the same hash."""
    tree = make_tree({"a.txt": "a"})
    first = Commit.create("Initial", "Ada", tree, timestamp=WHEN)
    second = Commit.create("Initial", "Ada", tree, timestamp=WHEN)

    assert first.hash == second.hash


@pytest.mark.parametrize(
    "changes",
    [
        {"message": "Other"},
        {"author": "Grace"},
        {"parent": "f" * 40},
        {"timestamp": datetime(2026, 3, 1, 9, 31, tzinfo=timezone.utc)},
    ],
)
def test_commit_hash_depends_on_every_input(changes):
    """Test that message, author, lineage and time all feed the hash."""
    base = {"message": "Initial", "author": "Ada", "parent": None, "timestamp": WHEN}
    tree = make_tree({"a.txt": "a"})
    original = Commit.create(tree=tree, **base)
    changed = Commit.create(tree=tree, **{**base, **changes})

    assert original.hash != changed.hash


def test_commit_is_frozen():
    commit = Commit.create("Initial", "Ada", make_tree({"a.txt": "a"}), timestamp=WHEN)

    with pytest.raises(ValidationError):
        commit.message = "rewritten"


def test_commit_tree_is_copied_on_create():
    """Mutating the source tree after commit must not change the snapshot."""
    tree = make_tree({"a.txt": "a"})
    commit = Commit.create("Initial", "Ada", tree, timestamp=WHEN)
    tree["a.txt"].content = "changed"

    assert commit.tree["a.txt"].content == "a"


def test_merge_commit_parents():
    merge = Commit.create(
        "Merge", "Ada", {}, parent="a" * 40, parents=["a" * 40, "b" * 40], timestamp=WHEN
    )
    regular = Commit.create("Regular", "Ada", {}, parent="a" * 40, timestamp=WHEN)
    root = Commit.create("Root", "Ada", {}, timestamp=WHEN)

    assert merge.is_merge_commit
    assert merge.get_parents() == ["a" * 40, "b" * 40]
    assert not regular.is_merge_commit
    assert regular.get_parents() == ["a" * 40]
    assert root.get_parents() == []


def test_commit_format():
    commit = Commit.create("Add README", "Ada", {}, timestamp=WHEN)

    assert commit.format(oneline=True) == f"{commit.short_hash} Add README"
    full = commit.format()
    assert full.startswith(f"commit {commit.hash}\n")
    assert "Author: Ada\n" in full
    assert "Date:   Sun, 01 Mar 2026 09:30:00 GMT\n" in full
    assert full.endswith("\n    Add README\n")


def test_branch_update_and_defaults():
    branch = Branch(name="main")

    assert branch.is_unborn
    assert branch.is_default
    branch.update_commit("a" * 40)
    assert branch.commit_hash == "a" * 40
    assert not Branch(name="feature", commit_hash="a" * 40).is_default


def test_branch_dumps_camel_case():
    assert Branch(name="main", commit_hash="abc").to_dict() == {"name": "main", "commitHash": "abc"}


def _pull_request():
    return PullRequest(
        title="Add feature",
        source_url="https://example.com/user/repo.git",
        source_branch="feature",
        target_url="https://example.com/org/repo.git",
        target_branch="main",
        author="Ada",
    )


def test_pull_request_defaults():
    pr = _pull_request()

    assert re.fullmatch(r"pr-\d+-[0-9a-z]{7}", pr.id)
    assert pr.status == PullRequestStatus.OPEN
    assert pr.merged_at is None


def test_pull_request_merges_once():
    pr = _pull_request()
    pr.mark_merged(WHEN)

    assert pr.status == PullRequestStatus.MERGED
    assert pr.merged_at == WHEN
    with pytest.raises(InvalidTransitionError):
        pr.mark_merged()
    with pytest.raises(InvalidTransitionError):
        pr.close()


def test_pull_request_close_is_terminal():
    pr = _pull_request()
    pr.close()

    assert pr.status == PullRequestStatus.CLOSED
    with pytest.raises(InvalidTransitionError):
        pr.mark_merged()


def test_git_result_constructors():
    ok = GitResult.ok("done", "out")
    failed = GitResult.fail("fatal: nope", "Nope")

    assert ok.success and ok.output == "out" and ok.error is None
    assert not failed.success and failed.error == "Nope" and failed.output is None
