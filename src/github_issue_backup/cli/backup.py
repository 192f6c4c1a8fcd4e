"""Backup commands for GitHub Issue Backup."""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from github_issue_backup.backup import (
    BackupReport,
    BackupService,
    BackupStateStore,
    ExitCode,
    OutputFormat,
)
from github_issue_backup.cli.common import (
    DestinationOption,
    OutputFormatOption,
    TokenFileOption,
    TokenOption,
    build_client,
    console,
    resolve_token,
    run_async_command,
)
from github_issue_backup.config import get_settings
from github_issue_backup.logging import get_logger

logger = get_logger(__name__)


def run_backup(
    owner: Annotated[
        str,
        typer.Option("--owner", "-o", help="Owner of the repository to back up"),
    ],
    repo: Annotated[
        str,
        typer.Option("--repo", "-r", help="Name of the repository to back up"),
    ],
    destination: DestinationOption,
    token: TokenOption = None,
    token_file: TokenFileOption = None,
    concurrency: Annotated[
        int | None,
        typer.Option(
            "--concurrency",
            "-c",
            min=1,
            max=20,
            help="Entries enriched in parallel (default from settings, 1 = one at a time)",
        ),
    ] = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Back up issues and pull requests of a repository to JSON files.

    The first run mirrors the full history. Later runs only fetch entries
    updated since the previous run, plus entries that failed before.

    Examples:
        ghbackup backup -o prebid -r prebid-server -d ./backup --token-file ~/.gh-token
        ghbackup -v backup -o prebid -r Prebid.js -d ./backup -c 4
    """
    logger.info("Starting backup of {}/{} on GitHub to '{}'", owner, repo, destination)

    settings = get_settings()
    config = settings.backup
    if concurrency is not None:
        config = config.model_copy(update={"entry_concurrency": concurrency})

    async def _backup() -> BackupReport:
        client = build_client(resolve_token(token, token_file))
        async with client:
            service = BackupService(client, destination, owner, repo, config=config)
            service.prepare_destination()
            return await service.run()

    report = run_async_command(_backup(), error_prefix="Backup failed")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(report.to_dict()))
    else:
        _print_report(report)

    if report.exit_code != ExitCode.SUCCESS:
        raise typer.Exit(int(report.exit_code))


def _print_report(report: BackupReport) -> None:
    result = report.fetch_result
    console.print(
        f"[bold]Loaded[/bold] {result.loaded_issues} issue(s) and "
        f"{result.loaded_pulls} pull request(s), wrote {report.records_written} file(s)"
    )
    if result.failed_issues:
        console.print(
            "[yellow]Failed issues:[/yellow] " + ", ".join(map(str, result.failed_issues))
        )
    if result.failed_pulls:
        console.print(
            "[yellow]Failed pull requests:[/yellow] " + ", ".join(map(str, result.failed_pulls))
        )
    if report.state_written:
        console.print(f"[dim]Next run continues from {report.started_at.isoformat()}[/dim]")
    elif report.records_written == 0 and not result.has_failures:
        console.print("[green]No updated issues or pull requests to save.[/green]")


def show_state(
    destination: DestinationOption,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Show the backup state stored in a destination directory.

    Examples:
        ghbackup state -d ./backup
        ghbackup state -d ./backup --format json
    """
    state = BackupStateStore(Path(destination)).load()

    if output_format == OutputFormat.JSON:
        console.print_json(state.model_dump_json() if state else "null")
        return

    if state is None:
        console.print(f"[yellow]No usable backup state in {destination}[/yellow]")
        console.print("The next backup will mirror the full history.")
        return

    table = Table(title=f"Backup state of {destination}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Version", str(state.version))
    table.add_row("Last backup", state.last_backup.isoformat())
    table.add_row("Failed issues", ", ".join(map(str, state.failed_issues)) or "-")
    table.add_row("Failed pull requests", ", ".join(map(str, state.failed_pulls)) or "-")
    console.print(table)
