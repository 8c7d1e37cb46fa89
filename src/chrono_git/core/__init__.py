"""Core engine: repository state, merge algorithms, command parsing and execution."""

from .config import EngineSettings, load_settings
from .engine import GitEngine
from .executor import CommandExecutor
from .merge import MergeConflict, MergeEngine, MergeResult
from .network import RemoteNetwork
from .parser import CommandName, CommandParser, ParsedCommand
from .repository import Repository

__all__ = [
    "CommandExecutor",
    "CommandName",
    "CommandParser",
    "EngineSettings",
    "GitEngine",
    "MergeConflict",
    "MergeEngine",
    "MergeResult",
    "ParsedCommand",
    "RemoteNetwork",
    "Repository",
    "load_settings",
]
