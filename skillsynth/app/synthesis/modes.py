"""
Synthesis mode matrix.

Two independent binary modes select the composition for a synthesis
request. The mapping is a fixed, closed table expressed as exhaustive
branches; there is no blended mode and no string-keyed lookup.

                     knowledge                    intelligence
  generated          skill_creation               skill_creation_intelligence
  foundational       foundational_creation        foundational_creation
  regenerative       skill_update                 skill_update_intelligence
  additive           foundational_additive_update foundational_additive_update
  reformat           skill_format_refresh         skill_format_refresh_intelligence
  match              skill_matching
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional, assert_never

from skillsynth.app.prompts.composition import TaskContext

if TYPE_CHECKING:
    from skillsynth.app.synthesis.models import SkillAttributes


class CreationMode(str, Enum):
    GENERATED = "generated"
    FOUNDATIONAL = "foundational"


class RefreshMode(str, Enum):
    REGENERATIVE = "regenerative"
    ADDITIVE = "additive"


class SkillType(str, Enum):
    KNOWLEDGE = "knowledge"
    INTELLIGENCE = "intelligence"


def default_skill_type(creation_mode: CreationMode) -> SkillType:
    """Foundational skills default to intelligence; generated to knowledge."""
    if creation_mode is CreationMode.FOUNDATIONAL:
        return SkillType.INTELLIGENCE
    return SkillType.KNOWLEDGE


def creation_context(mode: CreationMode, skill_type: SkillType) -> TaskContext:
    if mode is CreationMode.GENERATED:
        if skill_type is SkillType.KNOWLEDGE:
            return TaskContext.SKILL_CREATION
        if skill_type is SkillType.INTELLIGENCE:
            return TaskContext.SKILL_CREATION_INTELLIGENCE
        assert_never(skill_type)
    if mode is CreationMode.FOUNDATIONAL:
        return TaskContext.FOUNDATIONAL_CREATION
    assert_never(mode)


def refresh_context(mode: RefreshMode, skill_type: SkillType) -> TaskContext:
    if mode is RefreshMode.REGENERATIVE:
        if skill_type is SkillType.KNOWLEDGE:
            return TaskContext.SKILL_UPDATE
        if skill_type is SkillType.INTELLIGENCE:
            return TaskContext.SKILL_UPDATE_INTELLIGENCE
        assert_never(skill_type)
    if mode is RefreshMode.ADDITIVE:
        return TaskContext.FOUNDATIONAL_ADDITIVE_UPDATE
    assert_never(mode)


def reformat_context(skill_type: SkillType) -> TaskContext:
    if skill_type is SkillType.KNOWLEDGE:
        return TaskContext.SKILL_FORMAT_REFRESH
    if skill_type is SkillType.INTELLIGENCE:
        return TaskContext.SKILL_FORMAT_REFRESH_INTELLIGENCE
    assert_never(skill_type)


# ----------------------------------------------------------------------
# Modes persisted on skill attributes
# ----------------------------------------------------------------------

def creation_mode_from_attributes(
    attributes: Optional[SkillAttributes],
) -> CreationMode:
    """Stored creation mode; legacy skills without one are generated."""
    if attributes is None or attributes.creation_mode is None:
        return CreationMode.GENERATED
    return attributes.creation_mode


def refresh_mode_from_attributes(
    attributes: Optional[SkillAttributes],
) -> RefreshMode:
    """
    Stored refresh mode. Skills without one refresh additively when they
    were created foundationally and regeneratively otherwise.
    """
    if attributes is not None and attributes.refresh_mode is not None:
        return attributes.refresh_mode
    return default_refresh_mode(creation_mode_from_attributes(attributes))


def default_refresh_mode(creation_mode: CreationMode) -> RefreshMode:
    if creation_mode is CreationMode.FOUNDATIONAL:
        return RefreshMode.ADDITIVE
    return RefreshMode.REGENERATIVE
