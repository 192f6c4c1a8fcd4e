"""Main CLI application for GitHub Issue Backup."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from github_issue_backup import __version__
from github_issue_backup.cli import backup as backup_cmd
from github_issue_backup.cli import github as github_cmd
from github_issue_backup.config import get_settings
from github_issue_backup.logging import setup_logging

app = typer.Typer(
    name="ghbackup",
    help="Incremental backup of GitHub issues and pull requests to JSON files.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ghbackup version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """GitHub Issue Backup - Mirror issues and pull requests to disk."""
    settings = get_settings()
    log_config = settings.logging

    # Setup logging with CLI overrides
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


app.command("backup")(backup_cmd.run_backup)
app.command("state")(backup_cmd.show_state)
app.command("rate-limit")(github_cmd.rate_limit)


if __name__ == "__main__":
    app()
