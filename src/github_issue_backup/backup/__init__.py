"""Backup module - GitHub issues and pull requests to JSON files.

Services:
- FetchOrchestrator: Walks the issue listing and retries previous failures
- EntryEnricher: Fetches the sub-resources of one issue or pull request
- RecordWriter: Writes one JSON file per record
- BackupStateStore: Persists the incremental backup cursor
- BackupService: Runs fetcher and writer side by side
"""

from .channel import RecordChannel
from .enricher import EntryEnricher
from .enums import ExitCode, ListingMode, OutputFormat
from .errors import (
    BackupError,
    ChannelClosedError,
    ClientConstructionError,
    CredentialMissingError,
    DirectoryCreationError,
    EntryEnrichmentError,
    ListingFetchError,
    StateWriteError,
    TaskJoinError,
    WriteError,
)
from .orchestrator import FULL_BACKUP_SINCE, FetchOrchestrator
from .results import BackupReport, FetchResult, WorkItem, format_failure_summary
from .service import BackupService
from .state import STATE_FILE, BackupStateStore
from .writer import RecordWriter

__all__ = [
    # Services
    "BackupService",
    "BackupStateStore",
    "EntryEnricher",
    "FetchOrchestrator",
    "RecordChannel",
    "RecordWriter",
    # Results
    "BackupReport",
    "FetchResult",
    "WorkItem",
    "format_failure_summary",
    # Enums and constants
    "ExitCode",
    "FULL_BACKUP_SINCE",
    "ListingMode",
    "OutputFormat",
    "STATE_FILE",
    # Errors
    "BackupError",
    "ChannelClosedError",
    "ClientConstructionError",
    "CredentialMissingError",
    "DirectoryCreationError",
    "EntryEnrichmentError",
    "ListingFetchError",
    "StateWriteError",
    "TaskJoinError",
    "WriteError",
]
