"""
Typed user-message templates.

A composition declares its user message as a template with ``{{name}}``
placeholders. Filling is explicit and strict:

- every declared placeholder MUST receive a value
- values MUST NOT be supplied for undeclared placeholders
- values MUST be strings and are inserted verbatim (never re-parsed)

Any mismatch is a wiring defect between a composition and its caller
and raises ConfigurationError.

Rendering uses Jinja2 with StrictUndefined, so an unresolved placeholder
can never silently render as an empty string.
"""

from __future__ import annotations

from typing import Any, FrozenSet, Mapping

from jinja2 import Environment, StrictUndefined, Template, meta
from jinja2.exceptions import TemplateSyntaxError, UndefinedError
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from skillsynth.app.errors import ConfigurationError


_TEMPLATE_ENV = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


class UserTemplate(BaseModel):
    """
    Immutable user-message template with declared placeholders.
    """

    text: str = Field(
        ...,
        description="Template source using {{name}} placeholders",
    )

    _template: Template = PrivateAttr()
    _placeholders: FrozenSet[str] = PrivateAttr()

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @field_validator("text")
    @classmethod
    def template_must_parse(cls, v: str) -> str:
        try:
            _TEMPLATE_ENV.parse(v)
        except TemplateSyntaxError as exc:
            raise ValueError(f"Invalid user template: {exc}") from exc
        return v

    def model_post_init(self, context: Any) -> None:
        ast = _TEMPLATE_ENV.parse(self.text)
        self._placeholders = frozenset(meta.find_undeclared_variables(ast))
        self._template = _TEMPLATE_ENV.from_string(self.text)

    @property
    def placeholders(self) -> FrozenSet[str]:
        return self._placeholders

    def fill(self, values: Mapping[str, str]) -> str:
        """
        Render the template with exactly its declared placeholders.
        """
        supplied = set(values)

        missing = self._placeholders - supplied
        if missing:
            raise ConfigurationError(
                "User template has unresolved placeholders: "
                f"{', '.join(sorted(missing))}"
            )

        unexpected = supplied - self._placeholders
        if unexpected:
            raise ConfigurationError(
                "Values supplied for undeclared template placeholders: "
                f"{', '.join(sorted(unexpected))}"
            )

        for name, value in values.items():
            if not isinstance(value, str):
                raise ConfigurationError(
                    f"Template value for '{name}' must be str, "
                    f"got {type(value).__name__}"
                )

        try:
            return self._template.render(**values)
        except UndefinedError as exc:
            raise ConfigurationError(
                f"User template could not be resolved: {exc}"
            ) from exc
