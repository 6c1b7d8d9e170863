from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field, ConfigDict, field_validator

from skillsynth.app.prompts.user_template import UserTemplate


class OutputFormat(str, Enum):
    STRUCTURED = "structured"
    PROSE = "prose"


class TaskContext(str, Enum):
    """
    Closed set of composition keys.

    NOTE:
    Adding a context requires a matching composition in the catalog and
    a branch in the mode selection.
    """

    SKILL_CREATION = "skill_creation"
    SKILL_CREATION_INTELLIGENCE = "skill_creation_intelligence"
    SKILL_UPDATE = "skill_update"
    SKILL_UPDATE_INTELLIGENCE = "skill_update_intelligence"
    SKILL_MATCHING = "skill_matching"
    SKILL_FORMAT_REFRESH = "skill_format_refresh"
    SKILL_FORMAT_REFRESH_INTELLIGENCE = "skill_format_refresh_intelligence"
    FOUNDATIONAL_CREATION = "foundational_creation"
    FOUNDATIONAL_ADDITIVE_UPDATE = "foundational_additive_update"


class Composition(BaseModel):
    """
    Ordered recipe of fragments plus expected output shape for one task
    context.
    """

    context: str = Field(
        ...,
        min_length=1,
        description="Unique composition key (see TaskContext)",
    )

    name: str = Field(
        ...,
        description="Human-readable composition name",
    )

    description: str = Field(
        "",
        description="What the composition is used for",
    )

    fragment_ids: Tuple[str, ...] = Field(
        ...,
        description="Fragment ids in assembly order",
    )

    output_format: OutputFormat = Field(
        OutputFormat.STRUCTURED,
        description="Whether the model is expected to answer in JSON",
    )

    output_schema_hint: Optional[str] = Field(
        None,
        description="Schema text appended verbatim for structured output",
    )

    user_template: UserTemplate = Field(
        ...,
        description="Unfilled user-message template",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @field_validator("fragment_ids")
    @classmethod
    def fragment_ids_must_be_unique(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        seen = set()
        for fragment_id in v:
            if fragment_id in seen:
                raise ValueError(
                    f"Duplicate fragment id '{fragment_id}' in composition"
                )
            seen.add(fragment_id)
        return v
