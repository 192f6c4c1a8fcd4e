"""Enums for backup runs."""

from enum import Enum, IntEnum


class ExitCode(IntEnum):
    """Process exit status of a backup run.

    Every fatal error kind maps to its own code so wrappers (cron,
    systemd units, CI jobs) can tell them apart.
    """

    SUCCESS = 0
    CREATING_DIRS = 1
    CREATING_CLIENT = 2
    API_ERROR = 3
    NO_CREDENTIAL = 4
    INTERNAL_ERROR = 5
    WRITING = 6


class ListingMode(str, Enum):
    """How the issue listing is traversed.

    Both modes walk the listing in ascending order so an entry updated
    during the run moves behind the cursor instead of being skipped.
    """

    FULL = "full"
    """No previous state: every entry, sorted by creation time."""

    INCREMENTAL = "incremental"
    """Entries updated since the last backup, sorted by update time."""

    @property
    def sort(self) -> str:
        """Value of the listing's ``sort`` parameter."""
        return "created" if self is ListingMode.FULL else "updated"


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""
