"""
Formwork Kernel — Template Override Resolver

Decides which template key renders a slot for one element.

Two tiers:
  1. per-element overrides keyed by (element_type, element_id), consulted
     most specific first: field → group → section → root
  2. form-wide defaults
then the library fallback for the slot. The first tier that names the slot
wins; tiers are never merged.

Submit-controls zones get their own override table keyed by
(root_id, zone_id), consulted before the element tiers.
"""

from __future__ import annotations

import logging
from typing import Any

from formwork.kernel.errors import InvalidArgumentError
from formwork.kernel.types import (
    BASE_FALLBACKS,
    ELEMENT_TYPES,
    EMERGENCY_FALLBACK,
    SLOT_SUBMIT_CONTROLS_WRAPPER,
)

logger = logging.getLogger(__name__)

# (element type, context key) in resolution order
_ELEMENT_TIERS: list[tuple[str, str]] = [
    ("field", "field_id"),
    ("group", "group_id"),
    ("section", "section_id"),
    ("root", "root_id"),
]


class TemplateOverrideResolver:
    """Two-tier template key resolution for one session."""

    def __init__(self, form_defaults: dict[str, str] | None = None) -> None:
        self._form_defaults: dict[str, str] = dict(form_defaults or {})
        self._element_overrides: dict[tuple[str, str], dict[str, str]] = {}
        self._submit_zone_overrides: dict[tuple[str, str], str] = {}

    # -----------------------------------------------------------------------
    # Form defaults (tier 2)
    # -----------------------------------------------------------------------

    def set_form_defaults(self, defaults: dict[str, str]) -> None:
        self._form_defaults = dict(defaults)

    def override_form_defaults(self, overrides: dict[str, str]) -> None:
        self._form_defaults.update(overrides)

    def get_form_defaults(self) -> dict[str, str]:
        return dict(self._form_defaults)

    # -----------------------------------------------------------------------
    # Per-element overrides (tier 1)
    # -----------------------------------------------------------------------

    def set_element_overrides(self, element_type: str, element_id: str, overrides: dict[str, str]) -> None:
        """Merge slot overrides into the element's map."""
        self._check_element_type(element_type)
        if not element_id:
            raise InvalidArgumentError("TemplateOverrideResolver: element_id cannot be empty.")
        for slot, key in overrides.items():
            if not key:
                raise InvalidArgumentError(f'TemplateOverrideResolver: template key for "{slot}" cannot be empty.')
        self._element_overrides.setdefault((element_type, element_id), {}).update(overrides)

    def get_element_overrides(self, element_type: str, element_id: str) -> dict[str, str]:
        return dict(self._element_overrides.get((element_type, element_id), {}))

    def clear_element_overrides(self, element_type: str, element_id: str, slot: str | None = None) -> None:
        key = (element_type, element_id)
        if slot is None:
            self._element_overrides.pop(key, None)
            return
        overrides = self._element_overrides.get(key)
        if overrides is None:
            return
        overrides.pop(slot, None)
        if not overrides:
            del self._element_overrides[key]

    # -----------------------------------------------------------------------
    # Submit-controls zones
    # -----------------------------------------------------------------------

    def set_submit_controls_override(self, root_id: str, zone_id: str, template_key: str) -> None:
        if not template_key:
            raise InvalidArgumentError("TemplateOverrideResolver: submit controls template key cannot be empty.")
        self._submit_zone_overrides[(root_id, zone_id)] = template_key

    def clear_submit_controls_override(self, root_id: str, zone_id: str) -> None:
        self._submit_zone_overrides.pop((root_id, zone_id), None)

    # -----------------------------------------------------------------------
    # Resolution
    # -----------------------------------------------------------------------

    def resolve_template(self, slot: str, context: dict[str, Any] | None = None) -> str:
        """Template key for a slot given the element's ancestry ids."""
        if not slot:
            raise InvalidArgumentError("TemplateOverrideResolver: template slot cannot be empty.")
        context = context or {}

        if slot == SLOT_SUBMIT_CONTROLS_WRAPPER:
            root_id = context.get("root_id")
            zone_id = context.get("zone_id")
            if root_id and zone_id:
                key = self._submit_zone_overrides.get((str(root_id), str(zone_id)))
                if key:
                    logger.debug("TemplateOverrideResolver: %s → %s (zone %s)", slot, key, zone_id)
                    return key

        for element_type, context_key in _ELEMENT_TIERS:
            element_id = context.get(context_key)
            if not element_id:
                continue
            key = self._element_overrides.get((element_type, str(element_id)), {}).get(slot)
            if key:
                logger.debug("TemplateOverrideResolver: %s → %s (%s %s)", slot, key, element_type, element_id)
                return key

        key = self._form_defaults.get(slot)
        if key:
            logger.debug("TemplateOverrideResolver: %s → %s (form default)", slot, key)
            return key

        return self.get_system_fallback(slot)

    def get_system_fallback(self, slot: str) -> str:
        key = BASE_FALLBACKS.get(slot)
        if key is not None:
            return key
        logger.warning("TemplateOverrideResolver: no fallback for slot %r, using %s", slot, EMERGENCY_FALLBACK)
        return EMERGENCY_FALLBACK

    # -----------------------------------------------------------------------
    # Diagnostics
    # -----------------------------------------------------------------------

    def clear_all_overrides(self) -> None:
        self._element_overrides.clear()
        self._submit_zone_overrides.clear()

    def get_all_overrides(self) -> dict[str, Any]:
        return {
            "form_defaults": dict(self._form_defaults),
            "elements": {f"{t}:{i}": dict(o) for (t, i), o in self._element_overrides.items()},
            "submit_controls": {f"{r}:{z}": k for (r, z), k in self._submit_zone_overrides.items()},
        }

    @staticmethod
    def _check_element_type(element_type: str) -> None:
        if element_type not in ELEMENT_TYPES:
            raise InvalidArgumentError(
                f'TemplateOverrideResolver: unknown element type "{element_type}"; '
                f"expected one of {sorted(ELEMENT_TYPES)}."
            )
