"""
Model output schemas.

These schemas define the JSON object the model is asked to return for
each operation. They are the FIRST validation gate; the orchestrator then
validates scope definitions independently and reconciles citations.

IMPORTANT:
- Unknown top-level keys are ignored. Known keys must match exactly.
- scopeDefinition is kept raw here and validated separately so that a
  malformed scope surfaces as a ScopeValidationError.
- Citation ``id`` values proposed by the model are checked against the
  orchestrator's assignment, never trusted.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from skillsynth.app.synthesis.models import (
    ChangeReport,
    Contradiction,
    CreateNewRecommendation,
    ExtractedContent,
    SkillAttributes,
    SkillMatch,
    SplitRecommendation,
)


_OUTPUT_CONFIG = ConfigDict(
    frozen=True,
    extra="ignore",
    alias_generator=to_camel,
    populate_by_name=True,
)


class CitationOutput(BaseModel):
    id: Optional[int] = Field(None, ge=1)
    source_id: str = Field(..., min_length=1)
    label: Optional[str] = None
    url: Optional[str] = None

    model_config = _OUTPUT_CONFIG


class CreationOutput(BaseModel):
    """Output of generated and foundational creation."""

    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    summary: str
    scope_definition: Optional[Any] = None
    citations: List[CitationOutput] = Field(default_factory=list)
    contradictions: List[Contradiction] = Field(default_factory=list)
    attributes: Optional[SkillAttributes] = None

    model_config = _OUTPUT_CONFIG


class RevisionOutput(BaseModel):
    """Output of regenerative update, additive update and reformat."""

    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    summary: str
    scope_definition: Optional[Any] = None
    citations: List[CitationOutput] = Field(default_factory=list)
    contradictions: List[Contradiction] = Field(default_factory=list)
    attributes: Optional[SkillAttributes] = None
    changes: ChangeReport
    extracted_content: List[ExtractedContent] = Field(default_factory=list)
    split_recommendation: Optional[SplitRecommendation] = None

    model_config = _OUTPUT_CONFIG


class MatchingOutput(BaseModel):
    """Output of source-to-skill matching."""

    matches: List[SkillMatch] = Field(default_factory=list)
    create_new: Optional[CreateNewRecommendation] = None

    model_config = _OUTPUT_CONFIG
