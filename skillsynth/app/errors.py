"""
Error taxonomy for the prompt composition and skill-synthesis pipeline.

Every failure surfaced to a caller is one of the types below. None of them
is ever downgraded to a default value.

IMPORTANT:
- ConfigurationError indicates a deploy/config defect. It is never retried.
- PreconditionError is raised BEFORE any model call is attempted.
- GenerationOutputError discards the partially-built document. This layer
  performs no automatic retry.
- CitationInvariantViolation indicates a defect in this layer itself.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SynthesisError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(SynthesisError):
    """Unknown composition context, malformed template wiring, or bad registry."""


class FragmentNotFoundError(SynthesisError, LookupError):
    """Raised by FragmentRegistry.get for an unknown fragment id."""

    def __init__(self, fragment_id: str) -> None:
        super().__init__(f'Unknown fragment: "{fragment_id}"')
        self.fragment_id = fragment_id


class PreconditionError(SynthesisError):
    """Required inputs for the requested mode are missing."""


class GenerationOutputError(SynthesisError):
    """
    The model response failed to parse or failed schema/scope validation.
    """

    def __init__(self, message: str, *, raw_response: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw_response = raw_response


class ScopeValidationError(GenerationOutputError):
    """A returned scope definition is malformed."""


class CitationInvariantViolation(SynthesisError, AssertionError):
    """
    Citation numbering broke a cross-revision invariant.

    Numbers are assigned by the orchestrator, so this is an assertion
    failure, not a model error.
    """


class ModelInvocationError(SynthesisError):
    """The single external model call did not produce a response."""

    def __init__(self, message: str, *, failure_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.failure_type = failure_type


# ----------------------------------------------------------------------
# Non-fatal diagnostics
# ----------------------------------------------------------------------

class FragmentResolutionWarning(BaseModel):
    """
    A composition referenced a fragment id that did not resolve.

    Recorded on the BuiltPrompt and logged. Assembly continues without
    the fragment.
    """

    composition_id: str
    fragment_id: str
    message: str = Field(
        ...,
        description="Human-readable description of the miss",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )
