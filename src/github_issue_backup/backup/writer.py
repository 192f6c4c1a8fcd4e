"""Sequential Writer - persist enriched records as one JSON file each."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic_core import PydanticSerializationError

from github_issue_backup.logging import get_logger
from github_issue_backup.schemas import EnrichedRecord

from .errors import WriteError

if TYPE_CHECKING:
    from .channel import RecordChannel

logger = get_logger(__name__)


class RecordWriter:
    """Drains the record channel and writes ``<kind dir>/<number>.json`` files.

    Existing files are overwritten. The first failed write stops the
    writer; files already written stay in place.
    """

    def __init__(self, destination: Path) -> None:
        self._destination = destination

    def path_for(self, record: EnrichedRecord) -> Path:
        """Destination file of a record."""
        return self._destination / record.kind.directory / f"{record.number}.json"

    def write(self, record: EnrichedRecord) -> Path:
        """Serialize a record to indented JSON and write it.

        Raises:
            WriteError: If serialization or the file write failed
        """
        path = self.path_for(record)
        try:
            path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        except (OSError, PydanticSerializationError) as e:
            raise WriteError(f"Could not write {record} to {path}: {e}") from e
        logger.info("Written {}", path)
        return path

    async def drain(self, channel: RecordChannel) -> int:
        """Write records from the channel until it is closed.

        Args:
            channel: Channel filled by the fetch orchestrator

        Returns:
            Number of records written

        Raises:
            WriteError: On the first failed write; the receiving side of
                the channel is closed before raising
        """
        written = 0
        while (record := await channel.receive()) is not None:
            try:
                await asyncio.to_thread(self.write, record)
            except WriteError:
                channel.close_receiver()
                raise
            written += 1
        return written
