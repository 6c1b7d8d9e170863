"""
Synthesis event emitters.

Emitters receive every lifecycle event of a request. They observe; they
never influence the outcome, and an emitter failure must not fail the
request it describes.
"""

from __future__ import annotations

import logging
from typing import Protocol

from skillsynth.app.events.models import (
    SynthesisEvent,
    SynthesisEventType,
    TERMINAL_EVENT_TYPES,
)

logger = logging.getLogger(__name__)


class SynthesisEventEmitter(Protocol):
    async def emit(self, event: SynthesisEvent) -> None:
        ...


class NullEventEmitter:
    """Discards every event."""

    async def emit(self, event: SynthesisEvent) -> None:
        return


class LoggingEventEmitter:
    """
    Writes events to the standard logger.

    Phase events go to DEBUG; terminal events go to INFO, or WARNING for a
    failed request.
    """

    def __init__(self, log: logging.Logger = logger) -> None:
        self._log = log

    async def emit(self, event: SynthesisEvent) -> None:
        if event.event_type not in TERMINAL_EVENT_TYPES:
            level = logging.DEBUG
        elif event.event_type == SynthesisEventType.SYNTHESIS_FAILED:
            level = logging.WARNING
        else:
            level = logging.INFO

        self._log.log(
            level,
            "%s %s [%s] %s",
            event.operation,
            event.event_type.value,
            event.request_id,
            event.details or {},
        )
