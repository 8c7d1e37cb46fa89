"""Tokenizer and validator for git-style command lines."""

import shlex
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel, Field


class CommandName(str, Enum):
    """Every command the executor understands."""

    ADD = "add"
    COMMIT = "commit"
    STATUS = "status"
    LOG = "log"
    BRANCH = "branch"
    CHECKOUT = "checkout"
    MERGE = "merge"
    RESET = "reset"
    REMOTE = "remote"
    CLONE = "clone"
    PUSH = "push"
    PULL = "pull"
    FETCH = "fetch"
    FORK = "fork"
    PR = "pr"


SUBCOMMANDS: Dict[str, FrozenSet[str]] = {
    CommandName.REMOTE.value: frozenset({"add", "remove", "rm"}),
    CommandName.PR.value: frozenset({"create", "merge", "close", "list"}),
}

# Flags that consume the following token (or the rest of a short-flag cluster).
VALUE_FLAGS: FrozenSet[str] = frozenset(
    {"m", "message", "n", "max-count", "t", "title", "d", "description", "author"}
)

FlagValue = Union[str, bool]


class ParsedCommand(BaseModel):
    """Structured form of one command line."""

    command: str = ""
    subcommand: Optional[str] = None
    flags: Dict[str, FlagValue] = Field(default_factory=dict)
    arguments: List[str] = Field(default_factory=list)
    separator: bool = False  # a bare ``--`` was present
    raw: str = ""
    parse_error: Optional[str] = None

    def flag(self, *names: str) -> Optional[FlagValue]:
        """Value of the first of ``names`` that was given."""
        for name in names:
            if name in self.flags:
                return self.flags[name]
        return None

    def has_flag(self, *names: str) -> bool:
        return any(name in self.flags for name in names)


class ValidationResult(BaseModel):
    valid: bool
    error: Optional[str] = None
    message: Optional[str] = None
    suggestion: Optional[str] = None


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


class CommandParser:
    """Turns ``git commit -m "msg"`` into a ``ParsedCommand``."""

    def __init__(self, max_suggestion_distance: int = 2):
        self.max_suggestion_distance = max_suggestion_distance
        self.known_commands = [c.value for c in CommandName]

    def parse(self, line: str) -> ParsedCommand:
        parsed = ParsedCommand(raw=line)
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            parsed.parse_error = f"fatal: could not parse command: {e}"
            return parsed

        if tokens and tokens[0] == "git":
            tokens = tokens[1:]
        if not tokens:
            return parsed

        parsed.command = tokens[0]
        subcommands = SUBCOMMANDS.get(parsed.command, frozenset())
        rest = tokens[1:]
        i = 0
        while i < len(rest):
            token = rest[i]
            i += 1

            if parsed.separator:
                parsed.arguments.append(token)
            elif token == "--":
                parsed.separator = True
            elif token.startswith("--"):
                name, has_value, value = token[2:].partition("=")
                if has_value:
                    parsed.flags[name] = value
                elif name in VALUE_FLAGS:
                    if i >= len(rest):
                        parsed.parse_error = f"error: option `{name}' requires a value"
                        return parsed
                    parsed.flags[name] = rest[i]
                    i += 1
                else:
                    parsed.flags[name] = True
            elif token.startswith("-") and len(token) > 1:
                cluster = token[1:]
                if cluster.isdigit():
                    parsed.flags["n"] = cluster
                    continue
                for pos, char in enumerate(cluster):
                    if char not in VALUE_FLAGS:
                        parsed.flags[char] = True
                        continue
                    attached = cluster[pos + 1 :]
                    if attached:
                        parsed.flags[char] = attached
                    elif i < len(rest):
                        parsed.flags[char] = rest[i]
                        i += 1
                    else:
                        parsed.parse_error = f"error: switch `{char}' requires a value"
                        return parsed
                    break
            elif parsed.subcommand is None and not parsed.arguments and token in subcommands:
                parsed.subcommand = token
            else:
                parsed.arguments.append(token)

        return parsed

    def validate(self, parsed: ParsedCommand) -> ValidationResult:
        if parsed.parse_error:
            return ValidationResult(valid=False, error="Malformed command", message=parsed.parse_error)
        if not parsed.command:
            return ValidationResult(
                valid=False,
                error="No command given",
                message="usage: git <command> [<args>]",
            )
        if parsed.command in self.known_commands:
            return ValidationResult(valid=True)

        message = f"git: '{parsed.command}' is not a git command. See 'git --help'."
        suggestion = self.suggest(parsed.command)
        if suggestion is not None:
            message += f"\n\nDid you mean '{suggestion}'?"
        return ValidationResult(
            valid=False,
            error=f"Unknown command '{parsed.command}'",
            message=message,
            suggestion=suggestion,
        )

    def suggest(self, command: str) -> Optional[str]:
        """Closest known command within the suggestion distance, if any."""
        best: Optional[str] = None
        best_distance = self.max_suggestion_distance + 1
        for known in self.known_commands:
            distance = levenshtein(command, known)
            if distance < best_distance:
                best, best_distance = known, distance
        return best
