"""
Model invocation boundary.

The orchestrator sends ``(system_text, user_message)`` and receives text.
Clients normalize every outcome into a TextGenerationResult and NEVER
raise; the orchestrator decides what an unsuccessful result means.

IMPORTANT:
- Exactly one request per call. No retries at this layer.
- No timeout or cancellation policy beyond the transport timeout; callers
  impose cancellation around the call if they need it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Literal, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from azure.identity import (
    DefaultAzureCredential,
    get_bearer_token_provider,
)
from azure.core.exceptions import (
    ServiceResponseTimeoutError,
    HttpResponseError,
    ClientAuthenticationError,
)

from openai import APITimeoutError, AsyncAzureOpenAI, OpenAIError

from skillsynth.app.prompts.composition import OutputFormat

logger = logging.getLogger(__name__)


FailureType = Literal[
    "timeout",
    "refusal",
    "empty_response",
    "unexpected_error",
]


# ----------------------------------------------------------------------
# Execution Result
# ----------------------------------------------------------------------

class TextGenerationResult(BaseModel):
    """
    Normalized outcome of one model call.
    """

    success: bool
    text: Optional[str] = None

    # Raw usage telemetry (advisory only)
    token_metrics: Optional[Dict[str, Any]] = None

    failure_type: Optional[FailureType] = None
    raw_error: Optional[str] = None

    model_deployment: str

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def input_tokens(self) -> Optional[int]:
        return (self.token_metrics or {}).get("prompt_tokens")

    @property
    def output_tokens(self) -> Optional[int]:
        return (self.token_metrics or {}).get("completion_tokens")


# ----------------------------------------------------------------------
# Client Interface
# ----------------------------------------------------------------------

class TextGenerationClient(Protocol):
    async def generate(
        self,
        *,
        system_text: str,
        user_message: str,
        output_format: OutputFormat,
        request_id: Optional[str] = None,
    ) -> TextGenerationResult:
        ...


# ----------------------------------------------------------------------
# Azure OpenAI Client (Entra ID)
# ----------------------------------------------------------------------

class AzureOpenAITextClient:
    """
    Azure OpenAI implementation of TextGenerationClient.

    Message layout:
      1. System message: assembled instruction text
      2. User message: filled user template

    Structured requests ask for a JSON object response; the orchestrator
    still parses and validates the text itself.
    """

    def __init__(
        self,
        *,
        endpoint: str,
        deployment: str,
        api_version: str,
        timeout_seconds: float = 60.0,
        temperature: float = 0.2,
        max_output_tokens: int = 8192,
    ) -> None:
        self._deployment = deployment
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens

        credential = DefaultAzureCredential()
        token_provider = get_bearer_token_provider(
            credential,
            "https://cognitiveservices.azure.com/.default",
        )

        self._client = AsyncAzureOpenAI(
            azure_endpoint=endpoint,
            azure_ad_token_provider=token_provider,
            api_version=api_version,
            timeout=timeout_seconds,
        )

    async def generate(
        self,
        *,
        system_text: str,
        user_message: str,
        output_format: OutputFormat,
        request_id: Optional[str] = None,
    ) -> TextGenerationResult:
        request: Dict[str, Any] = {
            "model": self._deployment,
            "messages": [
                {"role": "system", "content": system_text},
                {"role": "user", "content": user_message},
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_output_tokens,
        }
        if output_format == OutputFormat.STRUCTURED:
            request["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(**request)

        except (APITimeoutError, ServiceResponseTimeoutError) as exc:
            logger.warning("Model call timed out (request %s): %s", request_id, exc)
            return self._failure("timeout", exc)

        except (OpenAIError, HttpResponseError, ClientAuthenticationError) as exc:
            logger.warning("Model call failed (request %s): %s", request_id, exc)
            return self._failure("unexpected_error", exc)

        # ------------------------------------------------------------------
        # Raw token telemetry extraction (client-only responsibility)
        # ------------------------------------------------------------------
        token_metrics: Optional[Dict[str, Any]] = None
        usage = getattr(response, "usage", None)

        if usage is not None:
            token_metrics = {
                "prompt_tokens": getattr(usage, "prompt_tokens", None),
                "completion_tokens": getattr(usage, "completion_tokens", None),
                "total_tokens": getattr(usage, "total_tokens", None),
            }

            details = getattr(usage, "prompt_tokens_details", None)
            if details is not None:
                token_metrics["cached_tokens"] = getattr(
                    details, "cached_tokens", None
                )

        if not response.choices:
            return TextGenerationResult(
                success=False,
                token_metrics=token_metrics,
                failure_type="empty_response",
                raw_error="Model returned no choices",
                model_deployment=self._deployment,
            )

        message = response.choices[0].message
        refusal = getattr(message, "refusal", None)
        if refusal:
            return TextGenerationResult(
                success=False,
                token_metrics=token_metrics,
                failure_type="refusal",
                raw_error=refusal,
                model_deployment=self._deployment,
            )

        if not message.content:
            return TextGenerationResult(
                success=False,
                token_metrics=token_metrics,
                failure_type="empty_response",
                raw_error="Model returned no content",
                model_deployment=self._deployment,
            )

        return TextGenerationResult(
            success=True,
            text=message.content,
            token_metrics=token_metrics,
            model_deployment=self._deployment,
        )

    def _failure(self, failure_type: FailureType, exc: Exception) -> TextGenerationResult:
        return TextGenerationResult(
            success=False,
            failure_type=failure_type,
            raw_error=str(exc),
            model_deployment=self._deployment,
        )
