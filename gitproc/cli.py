"""CLI entry point for gitproc."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from gitproc import __version__
from gitproc.commands import get_blob_contents, get_text_contents
from gitproc.config import get_settings, load_settings
from gitproc.errors import GitProcError
from gitproc.git import find_git_root, get_locator, git_version
from gitproc.utils.logging import setup_logging

app = typer.Typer(
    name="gitproc",
    help="Typed access to the git command line",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]gitproc[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """gitproc - run git and get typed results back."""
    settings = load_settings(config_path=config, force_reload=config is not None)
    setup_logging(level=settings.log_level, verbose=verbose)


@app.command()
def show(
    path: Path = typer.Argument(..., help="File to read"),
    rev: str = typer.Option("HEAD", "--rev", "-r", help="Revision to read from ('' for the index)"),
    repo: Optional[Path] = typer.Option(
        None,
        "--repo",
        help="Repository root (default: the repository containing the current directory)",
    ),
    binary: bool = typer.Option(False, "--binary", "-b", help="Read the raw blob bytes"),
) -> None:
    """Print the contents of a file at a revision."""
    repository = repo or find_git_root(Path.cwd()) or Path.cwd()
    # Relative paths are given from the current directory, not the repository root
    target = path if path.is_absolute() else Path.cwd() / path
    reader = get_blob_contents if binary else get_text_contents

    try:
        content = asyncio.run(reader(repository, rev, target))
    except GitProcError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if content is None:
        console.print(f"[yellow]'{path}' does not exist at '{rev}'[/yellow]")
        raise typer.Exit(1)

    typer.echo(content, nl=False)


@app.command()
def version() -> None:
    """Show the gitproc and git versions."""
    try:
        git = asyncio.run(git_version())
    except GitProcError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    table = Table(title="Versions")
    table.add_column("Component", style="bold")
    table.add_column("Version")
    table.add_row("gitproc", __version__)
    table.add_row("git", git or "[red]unknown[/red]")
    console.print(table)


@app.command()
def locate() -> None:
    """Show which git installation will be used."""
    settings = get_settings()
    locator = get_locator()
    location = asyncio.run(locator.resolve(settings))
    env = locator.environment(settings)

    console.print(Panel("[bold]Git Location[/bold]", border_style="blue"))

    if settings.has_explicit_location:
        source = "configured"
    elif location.found:
        source = "discovered"
    elif settings.use_local_git:
        source = "discovery failed, using PATH"
    else:
        source = "PATH"

    console.print(f"  Source:          {source}")
    console.print(f"  Binary:          {settings.git_binary}")
    console.print(f"  Git directory:   {env.get('LOCAL_GIT_DIRECTORY', '-')}")
    console.print(f"  Git exec-path:   {env.get('GIT_EXEC_PATH', '-')}")
    console.print(f"  Max buffer:      {settings.max_buffer} bytes")


if __name__ == "__main__":
    app()
