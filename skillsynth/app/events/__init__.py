from .models import SynthesisEvent, SynthesisEventType
from .emitter import SynthesisEventEmitter, NullEventEmitter, LoggingEventEmitter
from .memory_emitter import MemoryQueueEventEmitter

__all__ = [
    "SynthesisEvent",
    "SynthesisEventType",
    "SynthesisEventEmitter",
    "NullEventEmitter",
    "LoggingEventEmitter",
    "MemoryQueueEventEmitter",
]
