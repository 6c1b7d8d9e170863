from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List, Optional

from skillsynth.app.events.models import SynthesisEvent, TERMINAL_EVENT_TYPES

logger = logging.getLogger(__name__)

# Sentinel placed on the queue when the stream is finished
_END: Optional[SynthesisEvent] = None


class MemoryQueueEventEmitter:
    """
    Single-request, single-consumer progress stream.

    Events are yielded in emission order. The first completed or failed
    event closes the stream; later events are ignored.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Optional[SynthesisEvent]] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, event: SynthesisEvent) -> None:
        if self._closed:
            logger.debug(
                "Ignoring %s for request %s: stream closed",
                event.event_type.value,
                event.request_id,
            )
            return

        self._queue.put_nowait(event)

        if event.event_type in TERMINAL_EVENT_TYPES:
            await self.close()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_END)

    async def stream(self) -> AsyncIterator[SynthesisEvent]:
        while True:
            event = await self._queue.get()
            if event is _END:
                break
            yield event

    async def collect(self) -> List[SynthesisEvent]:
        """Drain the stream into a list (waits for the terminal event)."""
        return [event async for event in self.stream()]
