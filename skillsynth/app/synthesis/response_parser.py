"""
Model response parsing.

The model is asked for exactly one JSON object but may wrap it in
markdown fences or surround it with prose. Parsing decodes the FIRST
brace that opens a valid JSON object; stray braces in prose are skipped.

IMPORTANT:
- No object found, or an object that does not decode, is a
  GenerationOutputError. Nothing is repaired or guessed.
- Schema and scope validation failures abort the operation.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from skillsynth.app.errors import GenerationOutputError, ScopeValidationError
from skillsynth.app.synthesis.models import ScopeDefinition

T = TypeVar("T", bound=BaseModel)

_DECODER = json.JSONDecoder()


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Decode the first top-level JSON object in ``text``.

    Braces that do not open a valid object (prose such as ``{sources}``)
    are skipped.
    """
    if not text or not text.strip():
        raise GenerationOutputError(
            "Model response is empty",
            raw_response=text,
        )

    start = text.find("{")
    if start == -1:
        raise GenerationOutputError(
            "Model response contains no JSON object",
            raw_response=text,
        )

    error: Optional[json.JSONDecodeError] = None
    while start != -1:
        try:
            value, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError as exc:
            error = error or exc
        else:
            return value
        start = text.find("{", start + 1)

    raise GenerationOutputError(
        f"Model response JSON does not parse: {error}",
        raw_response=text,
    ) from error


def parse_structured_output(text: str, schema: Type[T]) -> T:
    payload = extract_json_object(text)

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise GenerationOutputError(
            f"Model response does not match {schema.__name__}: "
            f"{_summarize(exc)}",
            raw_response=text,
        ) from exc


def validate_scope_definition(raw: Any, *, raw_response: str | None = None) -> ScopeDefinition:
    """
    Independently validate a model-produced scope definition.

    A failure is never auto-corrected or partially accepted.
    """
    if raw is None:
        raise ScopeValidationError(
            "Invalid scope definition: scopeDefinition is missing",
            raw_response=raw_response,
        )

    try:
        return ScopeDefinition.model_validate(raw)
    except ValidationError as exc:
        raise ScopeValidationError(
            f"Invalid scope definition: {_summarize(exc)}",
            raw_response=raw_response,
        ) from exc


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "(root)"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)
