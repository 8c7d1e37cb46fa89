"""Shared fixtures for Chrono Git tests."""

import pytest

from chrono_git.core.engine import GitEngine
from chrono_git.core.network import RemoteNetwork
from chrono_git.core.repository import Repository
from helpers import StepClock, make_tree


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def network():
    """A fresh simulated network per test."""
    return RemoteNetwork()


@pytest.fixture
def engine(network, clock):
    """Engine over a repository seeded with two untracked files."""
    repo = Repository.create(
        make_tree({"README.md": "# Test Project", "index.js": 'console.log("Hello");'})
    )
    return GitEngine(repo, network=network, clock=clock)


@pytest.fixture
def empty_engine(network, clock):
    """Engine over an empty repository."""
    return GitEngine(network=network, clock=clock)


@pytest.fixture
def committed_engine(engine):
    """Engine with one commit containing both seed files."""
    engine.add_all()
    engine.commit("Initial commit")
    return engine
