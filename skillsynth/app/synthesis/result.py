from datetime import datetime, timezone
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from skillsynth.app.synthesis.models import (
    ChangeReport,
    CreateNewRecommendation,
    ExtractedContent,
    SkillDocument,
    SkillMatch,
    SplitRecommendation,
)


class TokenUsage(BaseModel):
    input: Optional[int] = None
    output: Optional[int] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class GenerationTransparency(BaseModel):
    """
    Exactly what was sent to the model and what came back.

    Diagnostic only. Reviewers use it to audit a revision; nothing in the
    pipeline reads it back.
    """

    system_text: str
    user_message: str
    raw_response: str
    composition_id: str
    fragment_ids: Tuple[str, ...]
    unresolved_fragment_ids: Tuple[str, ...] = ()
    model: str
    token_usage: TokenUsage = Field(default_factory=TokenUsage)
    prompt_hash: str
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    model_config = ConfigDict(frozen=True, extra="forbid")


class SynthesisResult(BaseModel):
    """
    Outcome of create, update or reformat.

    ``document`` is a complete replacement; the caller persists it.
    ``changes`` is None for creation.
    """

    document: SkillDocument
    changes: Optional[ChangeReport] = None
    extracted_content: List[ExtractedContent] = Field(default_factory=list)
    split_recommendation: Optional[SplitRecommendation] = None
    transparency: GenerationTransparency

    model_config = ConfigDict(frozen=True, extra="forbid")


class MatchResult(BaseModel):
    """
    Ranked matches (high, medium, low confidence) plus an optional
    recommendation to create a new skill.
    """

    source_id: str
    matches: List[SkillMatch] = Field(default_factory=list)
    create_new: Optional[CreateNewRecommendation] = None
    transparency: GenerationTransparency

    model_config = ConfigDict(frozen=True, extra="forbid")
