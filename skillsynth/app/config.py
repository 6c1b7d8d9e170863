"""
Runtime configuration for the skill-synthesis pipeline.

This module centralizes environment-driven configuration: which model
provider is used and how it is reached, the content ceilings applied
before text enters a prompt, and startup strictness.

Configuration is read once at startup and is immutable thereafter.
"""

from __future__ import annotations

import logging
import os
from pydantic import BaseModel, Field, field_validator, model_validator


class SynthesisConfig(BaseModel):
    """
    Runtime configuration for the skill-synthesis pipeline.
    """

    # ------------------------------------------------------------------
    # Model provider
    # ------------------------------------------------------------------

    MODEL_PROVIDER: str = Field(
        "disabled",
        description="Text generation provider identifier",
    )

    AZURE_OPENAI_ENDPOINT: str = Field(
        "",
        description="Azure OpenAI endpoint URL",
    )

    AZURE_OPENAI_DEPLOYMENT: str = Field(
        "",
        description="Azure OpenAI deployment name",
    )

    AZURE_OPENAI_API_VERSION: str = Field(
        "",
        description="Azure OpenAI API version",
    )

    MODEL_TIMEOUT_SECONDS: float = Field(
        60.0,
        gt=0,
        description="Transport timeout for the single model call",
    )

    MODEL_TEMPERATURE: float = Field(
        0.2,
        ge=0,
        le=2,
        description="Sampling temperature",
    )

    MODEL_MAX_OUTPUT_TOKENS: int = Field(
        8192,
        gt=0,
        description="Upper bound on generated tokens per call",
    )

    # ------------------------------------------------------------------
    # Content ceilings (characters)
    # ------------------------------------------------------------------

    MAX_SOURCE_CHARS: int = Field(
        8000,
        gt=0,
        description="Per-source content ceiling before truncation",
    )

    MAX_EXISTING_CONTENT_CHARS: int = Field(
        12000,
        gt=0,
        description="Ceiling for existing document content reused in updates",
    )

    MAX_MATCH_SOURCE_CHARS: int = Field(
        12000,
        gt=0,
        description="Ceiling for the source under matching",
    )

    # ------------------------------------------------------------------
    # Token budget and startup behavior
    # ------------------------------------------------------------------

    TOKEN_BUDGET_CEILING: int = Field(
        100000,
        gt=0,
        description="Default ceiling for session token budget trackers",
    )

    STRICT_FRAGMENT_RESOLUTION: bool = Field(
        False,
        description=(
            "Fail startup when a composition references a fragment that "
            "is not registered"
        ),
    )

    LOG_LEVEL: str = Field(
        "INFO",
        description="Root logging level",
    )

    # ------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ------------------------------------------------------------------

    @field_validator("MODEL_PROVIDER")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        allowed = {"disabled", "azure_openai"}
        if v not in allowed:
            raise ValueError(
                f"Unsupported MODEL_PROVIDER '{v}'. "
                f"Allowed values: {sorted(allowed)}"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown LOG_LEVEL '{v}'")
        return level

    @model_validator(mode="after")
    def azure_settings_required_if_enabled(self) -> "SynthesisConfig":
        if self.MODEL_PROVIDER == "azure_openai":
            missing = [
                name
                for name in (
                    "AZURE_OPENAI_ENDPOINT",
                    "AZURE_OPENAI_DEPLOYMENT",
                    "AZURE_OPENAI_API_VERSION",
                )
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(
                    "MODEL_PROVIDER is azure_openai but "
                    f"{', '.join(missing)} not configured."
                )
        return self

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "SynthesisConfig":
        """
        Load configuration from environment variables.

        All values are parsed once at startup and must remain immutable.
        """

        def env_bool(name: str, default: bool) -> bool:
            raw = os.getenv(name)
            if raw is None:
                return default
            return raw.lower() in {"1", "true", "yes", "on"}

        return cls(
            MODEL_PROVIDER=os.getenv(
                "SKILLSYNTH_MODEL_PROVIDER", "disabled"
            ),
            AZURE_OPENAI_ENDPOINT=os.getenv(
                "AZURE_OPENAI_ENDPOINT", ""
            ),
            AZURE_OPENAI_DEPLOYMENT=os.getenv(
                "AZURE_OPENAI_DEPLOYMENT", ""
            ),
            AZURE_OPENAI_API_VERSION=os.getenv(
                "AZURE_OPENAI_API_VERSION", ""
            ),
            MODEL_TIMEOUT_SECONDS=float(
                os.getenv("SKILLSYNTH_MODEL_TIMEOUT_SECONDS", "60")
            ),
            MODEL_TEMPERATURE=float(
                os.getenv("SKILLSYNTH_MODEL_TEMPERATURE", "0.2")
            ),
            MODEL_MAX_OUTPUT_TOKENS=int(
                os.getenv("SKILLSYNTH_MODEL_MAX_OUTPUT_TOKENS", "8192")
            ),
            MAX_SOURCE_CHARS=int(
                os.getenv("SKILLSYNTH_MAX_SOURCE_CHARS", "8000")
            ),
            MAX_EXISTING_CONTENT_CHARS=int(
                os.getenv("SKILLSYNTH_MAX_EXISTING_CONTENT_CHARS", "12000")
            ),
            MAX_MATCH_SOURCE_CHARS=int(
                os.getenv("SKILLSYNTH_MAX_MATCH_SOURCE_CHARS", "12000")
            ),
            TOKEN_BUDGET_CEILING=int(
                os.getenv("SKILLSYNTH_TOKEN_BUDGET_CEILING", "100000")
            ),
            STRICT_FRAGMENT_RESOLUTION=env_bool(
                "SKILLSYNTH_STRICT_FRAGMENT_RESOLUTION", False
            ),
            LOG_LEVEL=os.getenv(
                "SKILLSYNTH_LOG_LEVEL", "INFO"
            ),
        )

    model_config = {
        "frozen": True,
    }
