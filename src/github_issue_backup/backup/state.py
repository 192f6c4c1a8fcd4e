"""Backup State Store - read and write ``state.json``.

The state file is the cursor of incremental backups: the start time of
the last run that wrote data, plus the entries that run failed on.
Anything that cannot be trusted (missing, unreadable, corrupt, unknown
version) is treated as "no previous state", which triggers a full backup.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from github_issue_backup.logging import get_logger
from github_issue_backup.schemas import STATE_VERSION, BackupState

from .errors import StateWriteError
from .results import FetchResult

logger = get_logger(__name__)

STATE_FILE = "state.json"


class BackupStateStore:
    """Loads and saves the backup state of one destination directory."""

    def __init__(self, destination: Path) -> None:
        self._destination = destination

    @property
    def path(self) -> Path:
        return self._destination / STATE_FILE

    def load(self) -> BackupState | None:
        """Read the previous backup state.

        Returns:
            The state, or None if there is no usable state
        """
        path = self.path
        logger.info("Trying to read {}", path)
        try:
            contents = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Backup state file {} not found, doing a full backup", path)
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Backup state file {} could not be read: {}", path, e)
            return None

        try:
            state = BackupState.model_validate_json(contents)
        except ValidationError as e:
            logger.warning("Backup state file {} could not be deserialized: {}", path, e)
            return None

        if not state.is_supported:
            logger.warning("Backup state version {} is unknown, doing a full backup", state.version)
            return None

        logger.info("Doing an incremental GitHub backup starting from {}", state.last_backup)
        if state.failed_issues:
            logger.info("Retrying to fetch failed issues: {}", state.failed_issues)
        if state.failed_pulls:
            logger.info("Retrying to fetch failed PRs: {}", state.failed_pulls)
        return state

    @staticmethod
    def build(started_at: datetime, fetch_result: FetchResult) -> BackupState:
        """State to persist after a run that started at ``started_at``."""
        return BackupState(
            version=STATE_VERSION,
            last_backup=started_at,
            failed_issues=list(fetch_result.failed_issues),
            failed_pulls=list(fetch_result.failed_pulls),
        )

    def save(self, state: BackupState) -> Path:
        """Write the state through a temporary file and an atomic rename.

        Raises:
            StateWriteError: If the state could not be written
        """
        path = self.path
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._destination,
                prefix=".state-",
                suffix=".json",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(state.model_dump_json(indent=2))
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StateWriteError(f"Failed to write {STATE_FILE} to {self._destination}: {e}") from e

        logger.info("Written backup state to {}", path)
        return path
