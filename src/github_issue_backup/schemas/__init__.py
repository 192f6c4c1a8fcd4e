"""Pydantic schemas for GitHub Issue Backup.

This module provides GitHub response parsing, the on-disk record
layout and the persistent backup state.
"""

from .enums import EntryKind
from .github_api import GitHubIssueSummary
from .records import EnrichedRecord, IssueRecord, PullRecord, RawObject
from .state import STATE_VERSION, SUPPORTED_STATE_VERSIONS, BackupState

__all__ = [
    # Enums
    "EntryKind",
    # GitHub API
    "GitHubIssueSummary",
    # Records
    "EnrichedRecord",
    "IssueRecord",
    "PullRecord",
    "RawObject",
    # State
    "STATE_VERSION",
    "SUPPORTED_STATE_VERSIONS",
    "BackupState",
]
