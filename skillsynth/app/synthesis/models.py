"""
Skill-synthesis data model.

These models cross the persistence boundary as plain input and output.
They serialize with camelCase aliases (``sourceId``, ``scopeDefinition``)
and accept snake_case field names on input.

IMPORTANT:
- SkillDocument is never partially mutated. Every operation returns a
  complete replacement.
- Citation numbers are assigned by the orchestrator, never by the model.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from skillsynth.app.synthesis.modes import CreationMode, RefreshMode


_MODEL_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    alias_generator=to_camel,
    populate_by_name=True,
)


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ----------------------------------------------------------------------
# Inputs
# ----------------------------------------------------------------------

class Source(BaseModel):
    """
    Caller-provided source material. Read-only input to synthesis.
    """

    id: str = Field(..., min_length=1)
    type: str = Field(
        ...,
        description="Origin of the material (ticket, slack, gong, url, document, ...)",
    )
    label: str
    url: Optional[str] = None
    content: str

    model_config = _MODEL_CONFIG


# ----------------------------------------------------------------------
# Document parts
# ----------------------------------------------------------------------

class Citation(BaseModel):
    """
    Stable numeric reference from document content to a source.
    """

    number: int = Field(..., ge=1, alias="id")
    source_id: str
    label: str
    url: Optional[str] = None

    model_config = _MODEL_CONFIG


class ScopeDefinition(BaseModel):
    """
    Declared boundary of a skill's subject matter.
    """

    covers: str
    future_additions: List[str] = Field(default_factory=list)
    not_included: List[str] = Field(default_factory=list)

    model_config = _MODEL_CONFIG

    @field_validator("covers")
    @classmethod
    def covers_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("covers must not be empty")
        return v

    @field_validator("future_additions", "not_included")
    @classmethod
    def entries_must_not_be_blank(cls, v: List[str]) -> List[str]:
        for index, entry in enumerate(v):
            if not entry.strip():
                raise ValueError(f"entry {index} must not be empty")
        return v


class ContradictionSide(BaseModel):
    source_id: str = Field(..., alias="id")
    label: str
    excerpt: str

    model_config = _MODEL_CONFIG


class Contradiction(BaseModel):
    """
    Conflict between two sources. Advisory to a human reviewer; the
    pipeline never resolves a contradiction itself.
    """

    type: str
    description: str
    source_a: ContradictionSide
    source_b: ContradictionSide
    severity: Severity
    recommendation: str

    model_config = _MODEL_CONFIG


class SkillAttributes(BaseModel):
    keywords: List[str] = Field(default_factory=list)
    product: Optional[str] = None
    creation_mode: Optional[CreationMode] = None
    refresh_mode: Optional[RefreshMode] = None

    model_config = _MODEL_CONFIG


class SkillDocument(BaseModel):
    """
    Complete skill document revision.
    """

    title: str
    content: str
    summary: str
    scope_definition: Optional[ScopeDefinition] = None
    citations: List[Citation] = Field(default_factory=list)
    contradictions: List[Contradiction] = Field(default_factory=list)
    attributes: Optional[SkillAttributes] = None

    model_config = _MODEL_CONFIG


# ----------------------------------------------------------------------
# Revision reports
# ----------------------------------------------------------------------

class ChangeReport(BaseModel):
    sections_added: List[str] = Field(default_factory=list)
    sections_updated: List[str] = Field(default_factory=list)
    sections_removed: List[str] = Field(default_factory=list)
    change_summary: str

    model_config = _MODEL_CONFIG


class ExtractedContent(BaseModel):
    source_id: str
    extracted: str

    model_config = _MODEL_CONFIG


class SuggestedSkill(BaseModel):
    title: str
    scope: str

    model_config = _MODEL_CONFIG


class SplitRecommendation(BaseModel):
    should_split: bool
    reason: Optional[str] = None
    suggested_skills: List[SuggestedSkill] = Field(default_factory=list)

    model_config = _MODEL_CONFIG


# ----------------------------------------------------------------------
# Matching
# ----------------------------------------------------------------------

class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


CONFIDENCE_RANK = {
    Confidence.HIGH: 0,
    Confidence.MEDIUM: 1,
    Confidence.LOW: 2,
}


class SkillScopeCandidate(BaseModel):
    """An existing skill offered to the matcher."""

    id: str = Field(..., min_length=1)
    title: str
    scope_definition: Optional[ScopeDefinition] = None

    model_config = _MODEL_CONFIG


class SkillMatch(BaseModel):
    skill_id: str
    skill_title: str
    confidence: Confidence
    reason: str
    matched_criteria: Optional[str] = None
    suggested_excerpt: Optional[str] = None

    model_config = _MODEL_CONFIG


class SuggestedScope(BaseModel):
    covers: str
    future_additions: List[str] = Field(default_factory=list)

    model_config = _MODEL_CONFIG


class CreateNewRecommendation(BaseModel):
    recommended: bool
    suggested_title: Optional[str] = None
    suggested_scope: Optional[SuggestedScope] = None

    model_config = _MODEL_CONFIG


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------

def derive_description(summary: str, scope: Optional[ScopeDefinition]) -> str:
    """
    Short listing description: ``"<summary>. Use when: <covers>"``.
    """
    base = summary.strip().rstrip(".")
    if scope is None:
        return f"{base}."
    return f"{base}. Use when: {scope.covers.strip()}"
