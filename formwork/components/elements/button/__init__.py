"""Button control for submit zones."""

from __future__ import annotations

from typing import Any

from formwork.components.base import ComponentBuilderBase, NormalizerBase

BUTTON_TYPES = {"submit", "button", "reset"}

DEFAULTS: dict[str, Any] = {"type": "submit", "variant": "primary"}


class Builder(ComponentBuilderBase):
    def __init__(self, id: str, label: str, component: str = "elements.button") -> None:
        super().__init__(id, label, component)
        self._context.update(DEFAULTS)

    def type(self, button_type: str) -> Builder:
        self._context["type"] = button_type
        return self

    def variant(self, variant: str) -> Builder:
        self._context["variant"] = variant
        return self


class Normalizer(NormalizerBase):
    component_type = "form_element"

    def normalize(self, context: dict[str, Any], warn: Any) -> dict[str, Any]:
        context = super().normalize(context, warn)
        button_type = context.get("type") or DEFAULTS["type"]
        if button_type not in BUTTON_TYPES:
            warn(f'unknown button type "{button_type}", using submit')
            button_type = "submit"
        context["button_type"] = button_type
        variant = context.get("variant") or DEFAULTS["variant"]
        context["css_class"] = f"formwork-button formwork-button--{variant}"
        return context
