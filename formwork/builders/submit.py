"""
Formwork Builders — Submit Controls

Collects the controls of a container's submit zone and re-sends the full,
ordered list after each change. Controls are upserted by id.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from formwork.builders.field import create_component_builder
from formwork.kernel.errors import InvalidArgumentError
from formwork.kernel.types import DEFAULT_SUBMIT_ZONE, SLOT_SUBMIT_CONTROLS_WRAPPER

if TYPE_CHECKING:
    from formwork.kernel.form import Form

BUTTON_COMPONENT = "elements.button"


class SubmitControlsBuilder:
    def __init__(self, form: Form, zone_id: str = DEFAULT_SUBMIT_ZONE, template: str | None = None) -> None:
        self._form = form
        self._zone_id = zone_id or DEFAULT_SUBMIT_ZONE
        self._controls: list[dict[str, Any]] = []
        form.update("submit_controls_zone", {"container_id": form.form_id, "zone_id": self._zone_id})
        if template is not None:
            self.template(template)

    @property
    def zone_id(self) -> str:
        return self._zone_id

    def template(self, template_key: str) -> SubmitControlsBuilder:
        if not template_key or not template_key.strip():
            raise InvalidArgumentError("Submit controls template key cannot be empty.")
        self._form.update(
            "template_override",
            {
                "element_type": "root",
                "element_id": self._form.form_id,
                "zone_id": self._zone_id,
                "overrides": {SLOT_SUBMIT_CONTROLS_WRAPPER: template_key},
            },
        )
        return self

    def before(self, callback: Any) -> SubmitControlsBuilder:
        return self._zone(before=callback)

    def after(self, callback: Any) -> SubmitControlsBuilder:
        return self._zone(after=callback)

    def button(
        self,
        control_id: str,
        label: str,
        configure: Callable[[Any], Any] | None = None,
    ) -> SubmitControlsBuilder:
        """Add a submit button; `configure` receives the button builder."""
        self._check_control(control_id, label)
        builder = create_component_builder(self._form, control_id, label, BUTTON_COMPONENT)
        builder.type("submit")
        if configure is not None:
            configure(builder)
        return self._upsert(builder.to_dict())

    def field(
        self,
        control_id: str,
        label: str,
        component: str,
        context: dict[str, Any] | None = None,
    ) -> SubmitControlsBuilder:
        """Add any component with a builder factory as a control."""
        self._check_control(control_id, label)
        builder = create_component_builder(self._form, control_id, label, component)
        data = builder.to_dict()
        data["component_context"] = {**data.get("component_context", {}), **(context or {})}
        return self._upsert(data)

    def end_submit_controls(self) -> Form:
        return self._form

    end = end_submit_controls

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    @staticmethod
    def _check_control(control_id: str, label: str) -> None:
        if not control_id or not str(control_id).strip():
            raise InvalidArgumentError("Submit control id cannot be empty.")
        if not label or not str(label).strip():
            raise InvalidArgumentError(f'Submit control "{control_id}" needs a label.')

    def _upsert(self, control: dict[str, Any]) -> SubmitControlsBuilder:
        control.setdefault("order", 0)
        for i, existing in enumerate(self._controls):
            if existing["id"] == control["id"]:
                self._controls[i] = control
                break
        else:
            self._controls.append(control)
        self._form.update(
            "submit_controls_set",
            {"container_id": self._form.form_id, "zone_id": self._zone_id, "controls": list(self._controls)},
        )
        return self

    def _zone(self, **hooks: Any) -> SubmitControlsBuilder:
        self._form.update("submit_controls_zone", {"container_id": self._form.form_id, "zone_id": self._zone_id, **hooks})
        return self
