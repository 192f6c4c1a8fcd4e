"""Enums for Pydantic schemas."""

from enum import Enum


class EntryKind(str, Enum):
    """Kind of a repository entry.

    Issues and pull requests share one number space per repository
    but are stored in separate directories.
    """

    ISSUE = "issue"
    PULL = "pull"

    @property
    def directory(self) -> str:
        """Name of the destination sub-directory for this kind."""
        return "issues" if self is EntryKind.ISSUE else "pulls"

    @property
    def label(self) -> str:
        """Human-readable label used in log messages."""
        return "issue" if self is EntryKind.ISSUE else "pull-request"
