"""Maps parsed command lines onto ``GitEngine`` calls."""

import logging
from typing import Callable, Dict, Optional

from chrono_git.core.engine import GitEngine
from chrono_git.core.parser import CommandName, CommandParser, ParsedCommand
from chrono_git.errors import ExecutorConfigurationError
from chrono_git.models import GitResult

logger = logging.getLogger(__name__)

Handler = Callable[[GitEngine, ParsedCommand], GitResult]


def usage(message: str, error: str) -> GitResult:
    return GitResult.fail(message, error)


class CommandExecutor:
    """Checks the shape of each command, then hands it to the engine.

    Argument arity and flag combinations are validated here; whether a file,
    branch or remote actually exists is left to the engine.
    """

    def __init__(self, parser: Optional[CommandParser] = None):
        self.parser = parser or CommandParser()
        self.handlers: Dict[CommandName, Handler] = {
            CommandName.ADD: self._handle_add,
            CommandName.COMMIT: self._handle_commit,
            CommandName.STATUS: self._handle_status,
            CommandName.LOG: self._handle_log,
            CommandName.BRANCH: self._handle_branch,
            CommandName.CHECKOUT: self._handle_checkout,
            CommandName.MERGE: self._handle_merge,
            CommandName.RESET: self._handle_reset,
            CommandName.REMOTE: self._handle_remote,
            CommandName.CLONE: self._handle_clone,
            CommandName.PUSH: self._handle_push,
            CommandName.PULL: self._handle_pull,
            CommandName.FETCH: self._handle_fetch,
            CommandName.FORK: self._handle_fork,
            CommandName.PR: self._handle_pr,
        }
        self.check_handlers()

    def check_handlers(self) -> None:
        """Raise ``ExecutorConfigurationError`` unless every command has a handler."""
        missing = [c.value for c in CommandName if c not in self.handlers]
        if missing:
            raise ExecutorConfigurationError(f"No handler for: {', '.join(missing)}")

    def execute(self, engine: GitEngine, command_line: str) -> GitResult:
        """Parse, validate and run one command line."""
        parsed = self.parser.parse(command_line)
        validation = self.parser.validate(parsed)
        if not validation.valid:
            return GitResult.fail(
                validation.message or "Invalid command", validation.error or "Invalid command"
            )
        return self.execute_parsed(engine, parsed)

    def execute_parsed(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        handler = self.handlers[CommandName(parsed.command)]
        logger.debug("Executing %s %s", parsed.command, parsed.arguments)
        try:
            return handler(engine, parsed)
        except Exception as e:  # noqa: BLE001
            logger.exception("Command '%s' raised", parsed.raw)
            return GitResult.fail(f"Error executing command: {e}", str(e))

    # Handlers

    def _handle_add(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        if parsed.has_flag("A", "all") or "." in parsed.arguments:
            return engine.add_all()
        if not parsed.arguments:
            return usage(
                "Nothing specified, nothing added.\nMaybe you wanted to say 'git add .'?",
                "No files specified",
            )
        if len(parsed.arguments) == 1:
            return engine.add(parsed.arguments[0])
        return engine.add_paths(parsed.arguments)

    def _handle_commit(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        message = parsed.flag("m", "message")
        if not isinstance(message, str) or not message:
            return usage(
                "Aborting commit due to empty commit message.\n"
                "Use 'git commit -m \"message\"' to provide a commit message.",
                "No commit message provided",
            )
        author = parsed.flag("author")
        return engine.commit(
            message,
            author=author if isinstance(author, str) else None,
            all_tracked=parsed.has_flag("a", "all"),
        )

    def _handle_status(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        return engine.status()

    def _handle_log(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        max_count = None
        raw_count = parsed.flag("n", "max-count")
        if raw_count is not None:
            try:
                max_count = int(raw_count)
            except (TypeError, ValueError):
                return usage(f"fatal: '{raw_count}': not an integer", "Invalid max count")
        return engine.log(oneline=parsed.has_flag("oneline"), max_count=max_count)

    def _handle_branch(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        if parsed.has_flag("d", "D", "delete"):
            return usage(
                "error: deleting branches is not supported in this environment",
                "Branch deletion not supported",
            )
        if not parsed.arguments:
            return engine.branch()
        return engine.branch(parsed.arguments[0])

    def _handle_checkout(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        if parsed.separator:
            if not parsed.arguments:
                return usage(
                    "You must specify a file to restore.\nUsage: git checkout -- <file>",
                    "No file specified",
                )
            result = None
            for file_path in parsed.arguments:
                result = engine.checkout_file(file_path)
                if not result.success:
                    return result
            return result

        if not parsed.arguments:
            return usage(
                "You must specify a branch name or commit hash.\n"
                "Usage: git checkout <branch> or git checkout -b <new-branch>",
                "No target specified",
            )
        return engine.checkout(parsed.arguments[0], create_branch=parsed.has_flag("b"))

    def _handle_merge(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        if not parsed.arguments:
            return usage(
                "You must specify which branch to merge.\nUsage: git merge <branch>",
                "No branch specified",
            )
        return engine.merge(parsed.arguments[0])

    def _handle_reset(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        hard = parsed.has_flag("hard")
        args = parsed.arguments

        if not hard and len(args) == 2 and args[0] == "HEAD":
            return engine.reset("HEAD", "mixed", args[1])
        if hard and len(args) <= 1:
            return engine.reset(args[0] if args else "HEAD", "hard")

        return usage(
            "Invalid reset command.\nUsage: git reset HEAD <file> or git reset --hard <commit>",
            "Invalid reset syntax",
        )

    def _handle_remote(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        sub = parsed.subcommand
        args = parsed.arguments

        if sub is None:
            if args:
                return usage(
                    f"error: Unknown subcommand: {args[0]}", "Invalid remote subcommand"
                )
            return engine.remote_list()

        if sub == "add":
            if len(args) < 2:
                return usage("Usage: git remote add <name> <url>", "Missing remote name or URL")
            return engine.remote_add(args[0], args[1])

        if not args:
            return usage("Usage: git remote remove <name>", "Missing remote name")
        return engine.remote_remove(args[0])

    def _handle_clone(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        if not parsed.arguments:
            return usage(
                "You must specify a repository to clone.\nUsage: git clone <url>",
                "No repository URL specified",
            )
        return engine.clone(parsed.arguments[0])

    def _handle_push(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        if len(parsed.arguments) < 2:
            return usage("Usage: git push <remote> <branch>", "Missing remote or branch name")
        return engine.push(parsed.arguments[0], parsed.arguments[1])

    def _handle_pull(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        if len(parsed.arguments) < 2:
            return usage("Usage: git pull <remote> <branch>", "Missing remote or branch name")
        return engine.pull(parsed.arguments[0], parsed.arguments[1])

    def _handle_fetch(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        if not parsed.arguments:
            return usage("Usage: git fetch <remote>", "No remote specified")
        return engine.fetch(parsed.arguments[0])

    def _handle_fork(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        args = parsed.arguments
        if len(args) < 2:
            return usage(
                "Usage: fork <source-url> <fork-url> [<name>]", "Missing source or fork URL"
            )
        return engine.fork(args[0], args[1], args[2] if len(args) > 2 else None)

    def _handle_pr(self, engine: GitEngine, parsed: ParsedCommand) -> GitResult:
        sub = parsed.subcommand
        args = parsed.arguments

        if sub is None or sub == "list":
            if sub is None and args:
                return usage(
                    f"error: Unknown subcommand: {args[0]}\n"
                    "Usage: pr <create|merge|close|list> ...",
                    "Invalid pr subcommand",
                )
            return engine.list_pull_requests()

        if sub == "create":
            title = parsed.flag("t", "title")
            if len(args) != 4 or not isinstance(title, str):
                return usage(
                    "Usage: pr create <source-url> <source-branch> <target-url> <target-branch> "
                    '-t "<title>" [-d "<description>"]',
                    "Missing pull request arguments",
                )
            description = parsed.flag("d", "description")
            author = parsed.flag("author")
            return engine.create_pull_request(
                title,
                description if isinstance(description, str) else "",
                args[0],
                args[1],
                args[2],
                args[3],
                author=author if isinstance(author, str) else None,
            )

        if len(args) != 1:
            return usage(f"Usage: pr {sub} <id>", "Missing pull request id")
        if sub == "merge":
            return engine.merge_pull_request(args[0])
        return engine.close_pull_request(args[0])
