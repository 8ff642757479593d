"""Single-line text input with every role."""

from __future__ import annotations

from typing import Any

from formwork.components.base import AssetsBase, ComponentBuilderBase, SanitizerBase, ValidatorBase
from formwork.kernel.results import ScriptDefinition, StyleDefinition

DEFAULTS: dict[str, Any] = {"placeholder": ""}


class Builder(ComponentBuilderBase):
    def placeholder(self, text: str) -> Builder:
        self._context["placeholder"] = text
        return self

    def max_length(self, length: int) -> Builder:
        self._context["max_length"] = int(length)
        return self


class Validator(ValidatorBase):
    def _validate_value(self, value: Any, context: dict[str, Any], emit_warning: Any) -> bool:
        max_length = context.get("max_length")
        if max_length is not None and len(str(value)) > int(max_length):
            emit_warning(f"Must be at most {max_length} characters.")
            return False
        return True


class Sanitizer(SanitizerBase):
    def sanitize(self, value: Any, context: dict[str, Any], emit_notice: Any) -> Any:
        if isinstance(value, str) and value != value.strip():
            emit_notice("Surrounding whitespace removed.")
            return value.strip()
        return value


class Assets(AssetsBase):
    def styles(self) -> list[StyleDefinition]:
        return [StyleDefinition(handle="fixture-text", src="text.css")]

    def scripts(self) -> list[ScriptDefinition]:
        return [ScriptDefinition(handle="fixture-text-js", src="text.js", hook="footer")]
