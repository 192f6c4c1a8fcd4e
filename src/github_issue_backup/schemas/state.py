"""Persistent backup state schema.

Stored as ``state.json`` in the backup destination. Version 1 documents
only carried ``last_backup``; version 2 added the failure lists.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

STATE_VERSION = 2
"""Version stamped on every state document this build writes."""

SUPPORTED_STATE_VERSIONS = frozenset({1, STATE_VERSION})
"""Versions this build can load."""


class BackupState(BaseModel):
    """Cursor and failure memory of the previous backup run."""

    version: int = Field(ge=0, description="Schema version of the state document")
    last_backup: datetime = Field(description="Start time (UTC) of the last run that wrote data")
    failed_issues: list[int] = Field(
        default_factory=list, description="Issue numbers that could not be fetched"
    )
    failed_pulls: list[int] = Field(
        default_factory=list, description="Pull request numbers that could not be fetched"
    )

    @field_validator("last_backup")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        """Interpret naive timestamps as UTC and normalize aware ones to UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    @property
    def is_supported(self) -> bool:
        """True if this build understands the document's version."""
        return self.version in SUPPORTED_STATE_VERSIONS

    @property
    def has_failures(self) -> bool:
        """True if the previous run left entries to retry."""
        return bool(self.failed_issues or self.failed_pulls)
