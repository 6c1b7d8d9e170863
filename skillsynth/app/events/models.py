from __future__ import annotations

from typing import Any, Dict, Optional
from enum import Enum
from datetime import datetime, timezone
from uuid import uuid4, UUID

from pydantic import BaseModel, Field, ConfigDict


# ----------------------------------------------------------------------
# Event Types (Finite)
# ----------------------------------------------------------------------
class SynthesisEventType(str, Enum):
    """
    Progression events emitted during one synthesis request.

    NOTE:
    New entries must preserve observational semantics.
    """

    # ------------------------------------------------------------------
    # Request lifecycle
    # ------------------------------------------------------------------
    SYNTHESIS_STARTED = "synthesis_started"
    SYNTHESIS_COMPLETED = "synthesis_completed"
    SYNTHESIS_FAILED = "synthesis_failed"

    # ------------------------------------------------------------------
    # Prompt assembly
    # ------------------------------------------------------------------
    PROMPT_ASSEMBLED = "prompt_assembled"
    FRAGMENT_UNRESOLVED = "fragment_unresolved"

    # ------------------------------------------------------------------
    # Model invocation (observational only)
    # ------------------------------------------------------------------
    MODEL_INVOCATION_STARTED = "model_invocation_started"
    MODEL_INVOCATION_COMPLETED = "model_invocation_completed"

    # ------------------------------------------------------------------
    # Output validation
    # ------------------------------------------------------------------
    OUTPUT_VALIDATED = "output_validated"


TERMINAL_EVENT_TYPES = frozenset({
    SynthesisEventType.SYNTHESIS_COMPLETED,
    SynthesisEventType.SYNTHESIS_FAILED,
})


# ----------------------------------------------------------------------
# Event Model
# ----------------------------------------------------------------------
class SynthesisEvent(BaseModel):
    """
    An immutable observation of a phase transition within one request.

    Events are:
    - strictly observational
    - transport-agnostic
    - never inputs to synthesis decisions
    """

    event_id: UUID = Field(default_factory=uuid4)
    request_id: str = Field(..., description="Synthesis request identifier")
    operation: str = Field(
        ...,
        description="create, update, match or reformat",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    event_type: SynthesisEventType

    # Optional contextual metadata (composition id, counts, failure reason)
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
