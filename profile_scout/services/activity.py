"""Per-session ordered event channel.

The pipeline task is the only producer and the transport is the only
consumer. ``close()`` enqueues a sentinel so the consumer stops after every
event emitted before it has been delivered.
"""
from __future__ import annotations

import asyncio
from typing import AsyncIterator

from profile_scout.models.events import ActivityKind, ActivityStatus, SSEEvent
from profile_scout.models.session import SessionState
from profile_scout.services import streaming

_CLOSED = object()


class EventChannel:
    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    def send(self, event: SSEEvent) -> None:
        if self._closed:
            raise RuntimeError("Event channel is closed")
        self._queue.put_nowait(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[SSEEvent]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item


class ActivityEmitter:
    """Writes activity, partial-result and result events for one session."""

    def __init__(self, session: SessionState, channel: EventChannel):
        self.session = session
        self.channel = channel

    def add(self, kind: ActivityKind, status: ActivityStatus, message: str) -> None:
        self.channel.send(
            streaming.activity(
                kind,
                status,
                message,
                completed_steps=self.session.completed_steps,
                tokens_used=self.session.tokens_used,
            )
        )

    def partial_results(self, newly_added: int) -> None:
        self.channel.send(streaming.partial_results(self.session, newly_added))

    def results(self) -> None:
        self.channel.send(streaming.results(self.session))
