"""Test helpers shared across modules."""

from datetime import datetime, timedelta, timezone

from chrono_git.core.engine import GitEngine
from chrono_git.core.repository import Repository
from chrono_git.models import FileEntry


class StepClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + timedelta(seconds=1)
        return now


def make_tree(mapping):
    return {path: FileEntry(content=content) for path, content in mapping.items()}


def commit_file(engine: GitEngine, path: str, content: str, message: str) -> str:
    """Write one file, stage the whole working directory and commit; return the new hash."""
    engine.modify_file(path, content)
    engine.add_all()
    result = engine.commit(message)
    assert result.success, result.message
    return engine.get_repository().get_current_commit().hash


def hosted_repository(network, url, tree_contents, message="Initial commit"):
    """Host a store at ``url`` with one commit on ``main``; return (store, author engine)."""
    author = GitEngine(
        Repository.create(make_tree(tree_contents)), network=network, clock=StepClock()
    )
    author.add_all()
    author.commit(message)
    store = network.create_repository(url)
    author.remote_add("origin", url)
    result = author.push("origin", "main")
    assert result.success, result.message
    return store, author
