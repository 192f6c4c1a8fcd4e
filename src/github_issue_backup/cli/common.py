"""Common CLI option factories and helpers.

This module centralizes reusable CLI options to reduce duplication
and consolidate noqa comments for Typer's required function call pattern.

It also provides:
- `run_async_command`: Unified async execution mapping backup errors to exit codes
- `resolve_token` / `build_client`: Credential resolution and client construction
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from rich.console import Console

from github_issue_backup.backup import (
    BackupError,
    ClientConstructionError,
    CredentialMissingError,
    ExitCode,
    OutputFormat,
)
from github_issue_backup.config import get_settings
from github_issue_backup.github import GitHubClient, GitHubClientError
from github_issue_backup.logging import get_logger

# Shared console instance for CLI output
console = Console()

logger = get_logger(__name__)

T = TypeVar("T")


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management. Backup errors exit
    with the code they carry, GitHub errors with API_ERROR and anything
    else with INTERNAL_ERROR.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with the mapped code on error
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        raise
    except BackupError as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(int(e.exit_code)) from None
    except GitHubClientError as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(int(ExitCode.API_ERROR)) from None
    except Exception as e:
        logger.exception("Unexpected error")
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(int(ExitCode.INTERNAL_ERROR)) from None


# -----------------------------------------------------------------------------
# Credentials
# -----------------------------------------------------------------------------


def resolve_token(token: str | None, token_file: Path | None) -> str:
    """Resolve the GitHub token from the command line, a file or the settings.

    Order: ``--token``, then the trimmed contents of ``--token-file``,
    then ``GITHUB_TOKEN``.

    Raises:
        CredentialMissingError: If no non-empty token was found
    """
    if token:
        logger.info("Using the GitHub personal access token specified on the command line")
        return token

    if token_file is not None:
        logger.info("Reading the GitHub personal access token from '{}'", token_file)
        try:
            file_token = token_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise CredentialMissingError(
                f"Could not read GitHub personal access token from '{token_file}': {e}"
            ) from e
        if not file_token:
            raise CredentialMissingError(f"Token file '{token_file}' is empty")
        return file_token

    settings_token = get_settings().github_token
    if settings_token:
        logger.info("Using the GitHub personal access token from GITHUB_TOKEN")
        return settings_token

    raise CredentialMissingError("No GitHub personal access token present")


def build_client(token: str) -> GitHubClient:
    """Construct the GitHub client for a resolved token.

    The githubkit client is created here, before any directory is made.

    Raises:
        ClientConstructionError: If the client rejects the credential
    """
    try:
        client = GitHubClient(token=token)
        client.connect()
    except GitHubClientError as e:
        raise ClientConstructionError(
            f"Could not create GitHub client with the supplied personal access token: {e}"
        ) from e
    return client


# Typer requires function calls as default arguments, which triggers B008.
# Using Annotated with a centralized type alias keeps the noqa in one place.

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]
"""Output format option type for CLI commands.

Usage:
    def command(output_format: OutputFormatOption = OutputFormat.TEXT):
"""

TokenOption = Annotated[
    str | None,
    typer.Option(
        "--token",
        "-t",
        help="GitHub personal access token (falls back to --token-file, then GITHUB_TOKEN)",
    ),
]

TokenFileOption = Annotated[
    Path | None,
    typer.Option(
        "--token-file",
        help="File containing the GitHub personal access token",
    ),
]

DestinationOption = Annotated[
    Path,
    typer.Option(
        "--destination",
        "-d",
        help="Directory the backup is written to",
    ),
]
