"""
Formwork Components — Role Base Classes

A component is a Mustache template plus optional role classes living in the
Python module that mirrors the template's path. The loader recognizes a role
by name (Builder, Normalizer, Validator, Sanitizer, Assets) and base class.
"""

from __future__ import annotations

from collections.abc import Callable
from html import escape as _html_escape
from typing import Any

from formwork.kernel.results import ComponentRenderResult, ScriptDefinition, StyleDefinition

Emit = Callable[[str], None]


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class ComponentBuilderBase:
    """
    Fluent description of one field or control.
    The field proxy calls to_dict() after every change and re-emits the field.
    """

    def __init__(self, id: str, label: str, component: str = "") -> None:
        self._id = id
        self._label = label
        self._component = component
        self._order: int | None = None
        self._context: dict[str, Any] = {}

    def get_id(self) -> str:
        return self._id

    def get_label(self) -> str:
        return self._label

    def get_component(self) -> str:
        return self._component

    def order(self, order: int) -> ComponentBuilderBase:
        self._order = int(order)
        return self

    def description(self, text: str) -> ComponentBuilderBase:
        self._context["description"] = text
        return self

    def default(self, value: Any) -> ComponentBuilderBase:
        self._context["default"] = value
        return self

    def required(self, required: bool = True) -> ComponentBuilderBase:
        self._context["required"] = bool(required)
        return self

    def attribute(self, name: str, value: Any) -> ComponentBuilderBase:
        self._context.setdefault("attributes", {})[name] = value
        return self

    def attributes(self, attributes: dict[str, Any]) -> ComponentBuilderBase:
        self._context.setdefault("attributes", {}).update(attributes)
        return self

    def set(self, key: str, value: Any) -> ComponentBuilderBase:
        self._context[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self._id,
            "label": self._label,
            "component": self._component,
            "component_context": dict(self._context),
        }
        if self._order is not None:
            d["order"] = self._order
        return d


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


class NormalizerBase:
    """
    Prepares a render context and turns the template output into a result.
    `loader` is the ComponentLoader that owns the template.
    """

    component_type = "form_field"

    def __init__(self, loader: Any) -> None:
        self._loader = loader

    def render(self, alias: str, context: dict[str, Any]) -> dict[str, Any]:
        warnings: list[str] = []
        normalized = self.normalize(dict(context), warnings.append)
        markup = self._loader.render_template(alias, normalized)
        return {"result": self.build_result(markup, normalized), "warnings": warnings}

    def normalize(self, context: dict[str, Any], warn: Emit) -> dict[str, Any]:
        attributes = context.get("attributes") or {}
        if not isinstance(attributes, dict):
            warn(f"attributes must be a map, got {type(attributes).__name__}")
            attributes = {}
        context["attributes_html"] = render_attributes(attributes)
        return context

    def build_result(self, markup: str, context: dict[str, Any]) -> ComponentRenderResult:
        return ComponentRenderResult(markup=markup, component_type=self.component_type)


def render_attributes(attributes: dict[str, Any]) -> str:
    """Escaped ` name="value"` pairs; True renders a bare attribute, False/None are skipped."""
    parts: list[str] = []
    for name in sorted(attributes):
        value = attributes[name]
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {_html_escape(str(name))}")
        else:
            parts.append(f' {_html_escape(str(name))}="{_html_escape(str(value))}"')
    return "".join(parts)


# ---------------------------------------------------------------------------
# Validation roles
# ---------------------------------------------------------------------------


class ValidatorBase:
    """Checks one submitted value. Empty optional values always pass."""

    def validate(self, value: Any, context: dict[str, Any], emit_warning: Emit) -> bool:
        if value in (None, "", []) and not context.get("required"):
            return True
        if value in (None, "", []):
            emit_warning("This field is required.")
            return False
        return self._validate_value(value, context, emit_warning)

    def _validate_value(self, value: Any, context: dict[str, Any], emit_warning: Emit) -> bool:
        return True


class SanitizerBase:
    """Cleans one submitted value before validation."""

    def sanitize(self, value: Any, context: dict[str, Any], emit_notice: Emit) -> Any:
        return value


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


class AssetsBase:
    """Styles and scripts a component needs whenever it is rendered."""

    requires_media: bool = False

    def styles(self) -> list[StyleDefinition]:
        return []

    def scripts(self) -> list[ScriptDefinition]:
        return []


ROLE_BASES: dict[str, type] = {
    "builder": ComponentBuilderBase,
    "normalizer": NormalizerBase,
    "validator": ValidatorBase,
    "sanitizer": SanitizerBase,
    "assets": AssetsBase,
}
