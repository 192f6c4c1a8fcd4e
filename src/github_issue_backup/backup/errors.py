"""Backup error hierarchy.

Each fatal error carries the process exit code it maps to. Per-entry
enrichment failures are the only errors the pipeline records and
continues past.
"""

from __future__ import annotations

from pathlib import Path

from github_issue_backup.schemas import EntryKind

from .enums import ExitCode


class BackupError(Exception):
    """Base exception for backup errors."""

    exit_code: ExitCode = ExitCode.INTERNAL_ERROR


class CredentialMissingError(BackupError):
    """Raised when no GitHub token could be resolved."""

    exit_code = ExitCode.NO_CREDENTIAL


class DirectoryCreationError(BackupError):
    """Raised when the destination directories cannot be created."""

    exit_code = ExitCode.CREATING_DIRS

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Could not create directory {path}: {cause}")
        self.path = path


class ClientConstructionError(BackupError):
    """Raised when the GitHub client cannot be built from the credential."""

    exit_code = ExitCode.CREATING_CLIENT


class ListingFetchError(BackupError):
    """Raised when a page of the issue listing cannot be fetched."""

    exit_code = ExitCode.API_ERROR

    def __init__(self, owner: str, repo: str, page: int, cause: Exception) -> None:
        super().__init__(f"Could not load issue page {page} for {owner}/{repo}: {cause}")
        self.page = page


class EntryEnrichmentError(BackupError):
    """Raised when an issue or pull request or one of its sub-resources fails."""

    exit_code = ExitCode.API_ERROR

    def __init__(self, kind: EntryKind, number: int, cause: Exception) -> None:
        super().__init__(f"Could not get {kind.label} #{number}: {cause}")
        self.kind = kind
        self.number = number


class WriteError(BackupError):
    """Raised when a record cannot be serialized or written."""

    exit_code = ExitCode.WRITING


class StateWriteError(BackupError):
    """Raised when the backup state file cannot be written."""

    exit_code = ExitCode.WRITING


class ChannelClosedError(BackupError):
    """Raised when sending to a channel whose receiver has stopped."""

    exit_code = ExitCode.WRITING


class TaskJoinError(BackupError):
    """Raised when the fetch task ends in an unexpected way."""

    exit_code = ExitCode.INTERNAL_ERROR
