"""Bounded channel between the fetcher and the writer.

Exactly one producer (the fetch orchestrator) and one consumer (the
record writer) share a channel. Its capacity is the pipeline's
backpressure: once it is full, ``send`` blocks the fetcher until the
writer catches up.
"""

from __future__ import annotations

import asyncio

from github_issue_backup.schemas import EnrichedRecord

from .errors import ChannelClosedError

DEFAULT_CAPACITY = 100

_END = object()


class RecordChannel:
    """Single-producer, single-consumer queue of enriched records.

    Usage:
        channel = RecordChannel(capacity=100)

        # producer
        await channel.send(record)
        await channel.close()

        # consumer
        while (record := await channel.receive()) is not None:
            write(record)
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("Channel capacity must be at least 1")
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=capacity)
        self._sender_closed = False
        self._receiver_closed = False

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    @property
    def receiver_closed(self) -> bool:
        return self._receiver_closed

    async def send(self, record: EnrichedRecord) -> None:
        """Queue a record, waiting while the channel is full.

        Raises:
            ChannelClosedError: If the receiver stopped or the sender already closed
        """
        if self._receiver_closed:
            raise ChannelClosedError(f"Cannot send {record}: writer has stopped")
        if self._sender_closed:
            raise ChannelClosedError(f"Cannot send {record}: channel is closed")
        await self._queue.put(record)

    async def receive(self) -> EnrichedRecord | None:
        """Take the next record, or None once the sender closed and all records are taken."""
        if self._receiver_closed:
            return None
        item = await self._queue.get()
        if item is _END:
            self._receiver_closed = True
            return None
        return item  # type: ignore[return-value]

    async def close(self) -> None:
        """Signal the receiver that no more records follow (sender side)."""
        if self._sender_closed or self._receiver_closed:
            self._sender_closed = True
            return
        self._sender_closed = True
        await self._queue.put(_END)

    def close_receiver(self) -> None:
        """Stop receiving (consumer side).

        Queued records are dropped so a sender blocked on a full channel
        resumes; its next send raises ChannelClosedError.
        """
        self._receiver_closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
