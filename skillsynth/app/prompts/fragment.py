from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict, PrivateAttr

from skillsynth.app.utils.tokens import estimate_tokens


class FragmentTier(IntEnum):
    """
    Editability tier of a fragment.

    Tier is metadata for the admin surface only. It has NO effect on
    prompt assembly.
    """

    LOCKED = 1
    CAUTION = 2
    EDITABLE = 3


class Fragment(BaseModel):
    """
    Immutable, reusable unit of instruction text.

    Fragments are keyed by id, rendered under a ``## <name>`` header, and
    never mutated after load.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Stable fragment identifier (e.g. source_fidelity)",
    )

    name: str = Field(
        ...,
        min_length=1,
        description="Human-readable name used as the block header",
    )

    description: str = Field(
        "",
        description="What the fragment instructs, for the admin surface",
    )

    tier: FragmentTier = Field(
        FragmentTier.EDITABLE,
        description="Editability tier (metadata only)",
    )

    content: str = Field(
        ...,
        description="Instruction text",
    )

    # Memoized on first access; content never changes after load
    _token_estimate: Optional[int] = PrivateAttr(default=None)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def token_estimate(self) -> int:
        if self._token_estimate is None:
            self._token_estimate = estimate_tokens(self.content)
        return self._token_estimate

    @property
    def has_content(self) -> bool:
        return bool(self.content.strip())
