"""Main CLI interface for Chrono Git."""

import shlex
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chrono_git import __version__
from chrono_git.core.engine import GitEngine
from chrono_git.core.executor import CommandExecutor
from chrono_git.core.logging_config import setup_logging
from chrono_git.core.parser import CommandParser
from chrono_git.core.repository import Repository
from chrono_git.core.workspace import Workspace, find_workspace
from chrono_git.errors import ChronoGitError
from chrono_git.models import GitResult

console = Console()

EXIT_WORDS = {"exit", "quit", ":q"}


def get_workspace_or_exit() -> Workspace:
    """Find the enclosing workspace or abort with an error message."""
    workspace = find_workspace()
    if workspace is None:
        console.print("[red]Chrono Git not initialized. Run 'chrono-git init' first.[/red]")
        raise click.Abort()
    return workspace


def load_engine_or_exit(workspace: Workspace) -> GitEngine:
    try:
        settings = workspace.settings()
        setup_logging(settings.log_level)
        return workspace.load_engine(settings)
    except ChronoGitError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort() from e


def print_result(result: GitResult) -> None:
    text = result.output if result.output else result.message
    if result.success:
        if text:
            console.print(text, markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(text, style="red", markup=False, highlight=False, soft_wrap=True)


def _command_line(args) -> str:
    """Rebuild a command line from click's argument tuple, keeping quoting."""
    args = list(args)
    if len(args) == 1:
        return args[0]
    return shlex.join(args)


@click.group()
@click.version_option(version=__version__)
def main():
    """Chrono Git - practice Git against an in-memory repository."""


@main.command()
@click.option(
    "--path",
    "workspace_path",
    type=click.Path(file_okay=False),
    default=".",
    help="Directory to create the workspace in",
)
@click.option("--force", is_flag=True, help="Discard any existing workspace state")
def init(workspace_path: str, force: bool):
    """Initialize a Chrono Git workspace."""
    root = Path(workspace_path).resolve()
    workspace = Workspace(root)
    try:
        workspace.init(force=force)
    except (ValueError, ChronoGitError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort() from e
    console.print(
        f"[green]Initialized empty Chrono Git repository in {workspace.workspace_dir}[/green]"
    )


@main.command(context_settings={"ignore_unknown_options": True})
@click.argument("command_args", nargs=-1, type=click.UNPROCESSED, required=True)
def run(command_args):
    """Run one git command, e.g. chrono-git run git commit -m "message"."""
    workspace = get_workspace_or_exit()
    engine = load_engine_or_exit(workspace)

    result = CommandExecutor(engine_parser(engine)).execute(engine, _command_line(command_args))
    workspace.save(engine)
    print_result(result)
    if not result.success:
        raise SystemExit(1)


@main.command()
def shell():
    """Start an interactive git prompt."""
    workspace = get_workspace_or_exit()
    engine = load_engine_or_exit(workspace)
    executor = CommandExecutor(engine_parser(engine))

    console.print(
        Panel(
            "Type git commands as you would in a terminal. 'exit' leaves the shell.",
            title="Chrono Git",
        )
    )
    while True:
        try:
            line = console.input(f"[bold cyan]({_head_label(engine)})[/bold cyan] $ ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        line = line.strip()
        if not line:
            continue
        if line in EXIT_WORDS:
            break

        result = executor.execute(engine, line)
        workspace.save(engine)
        print_result(result)


@main.command()
@click.option("--files/--no-files", default=True, help="Show working directory and index")
def show(files: bool):
    """Show branches, recent commits and files."""
    workspace = get_workspace_or_exit()
    engine = load_engine_or_exit(workspace)
    repo = engine.get_repository()

    console.print(f"[bold]HEAD:[/bold] {_head_label(engine)}")

    branch_table = Table(title="Branches")
    branch_table.add_column("Name", style="green")
    branch_table.add_column("Commit", style="cyan", no_wrap=True)
    for branch in sorted(repo.get_branches_list(), key=lambda b: b.name):
        marker = "* " if branch.name == repo.head else "  "
        branch_table.add_row(marker + branch.name, branch.commit_hash[:7] or "(unborn)")
    console.print(branch_table)

    current = repo.get_current_commit()
    if current is not None:
        commit_table = Table(title="History")
        commit_table.add_column("Commit", style="cyan", no_wrap=True)
        commit_table.add_column("Author", style="magenta")
        commit_table.add_column("Date", style="blue")
        commit_table.add_column("Message")
        for commit in repo.first_parent_history(current.hash)[:10]:
            label = commit.short_hash + (" (merge)" if commit.is_merge_commit else "")
            commit_table.add_row(
                label, commit.author, commit.timestamp.strftime("%Y-%m-%d %H:%M"), commit.message
            )
        console.print(commit_table)

    if files:
        file_table = Table(title="Files")
        file_table.add_column("Path", style="yellow")
        file_table.add_column("Working tree")
        file_table.add_column("Index")
        for path in sorted(set(repo.working_directory) | set(repo.staging_area)):
            working = "present" if path in repo.working_directory else "-"
            staged = "staged" if path in repo.staging_area else "-"
            file_table.add_row(path, working, staged)
        console.print(file_table)


@main.command()
@click.argument("file_path")
@click.argument("content", required=False, default="")
@click.option(
    "--from-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read content from a real file",
)
def write(file_path: str, content: str, from_file: Optional[str]):
    """Create or overwrite a file in the simulated working directory."""
    workspace = get_workspace_or_exit()
    engine = load_engine_or_exit(workspace)
    if from_file:
        content = Path(from_file).read_text(encoding="utf-8")
    result = engine.modify_file(file_path, content)
    workspace.save(engine)
    print_result(result)


@main.command()
@click.argument("file_path")
def rm(file_path: str):
    """Delete a file from the simulated working directory."""
    workspace = get_workspace_or_exit()
    engine = load_engine_or_exit(workspace)
    result = engine.delete_file(file_path)
    workspace.save(engine)
    print_result(result)
    if not result.success:
        raise SystemExit(1)


@main.group()
def network():
    """Manage simulated hosted repositories."""


@network.command("create")
@click.argument("url")
@click.option("--from-workspace", is_flag=True, help="Seed the store with the current repository")
def network_create(url: str, from_workspace: bool):
    """Host a repository at URL."""
    workspace = get_workspace_or_exit()
    engine = load_engine_or_exit(workspace)
    if engine.network.exists(url):
        console.print(f"[red]Error: repository '{url}' already exists[/red]")
        raise click.Abort()

    if from_workspace:
        local = engine.get_repository()
        store = Repository(
            commits=local.get_commits_list(),
            branches=[b.model_copy() for b in local.get_branches_list() if b.commit_hash],
        )
        store.update_head(local.head if local.head in store.branches else "")
        engine.network.register(url, store)
    else:
        engine.network.create_repository(url)
    workspace.save(engine)
    console.print(f"[green]Hosted repository at {url}[/green]")


@network.command("list")
def network_list():
    """List hosted repositories and pull requests."""
    workspace = get_workspace_or_exit()
    engine = load_engine_or_exit(workspace)

    table = Table(title="Hosted repositories")
    table.add_column("URL", style="cyan")
    table.add_column("Branches", style="green")
    table.add_column("Commits", style="yellow")
    for url in engine.network.urls():
        store = engine.network.lookup(url)
        branches = ", ".join(sorted(store.branches)) or "-"
        table.add_row(url, branches, str(len(store.commits)))
    console.print(table)

    pull_requests = engine.network.list_pull_requests()
    if pull_requests:
        pr_table = Table(title="Pull requests")
        pr_table.add_column("ID", style="cyan", no_wrap=True)
        pr_table.add_column("Title")
        pr_table.add_column("Status", style="magenta")
        for pr in pull_requests:
            pr_table.add_row(pr.id, pr.title, pr.status.value)
        console.print(pr_table)


def engine_parser(engine: GitEngine) -> CommandParser:
    return CommandParser(max_suggestion_distance=engine.settings.max_suggestion_distance)


def _head_label(engine: GitEngine) -> str:
    repo = engine.get_repository()
    if repo.is_detached_head():
        return f"HEAD detached at {repo.head[:7]}"
    return repo.head


if __name__ == "__main__":
    main()
