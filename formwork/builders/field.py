"""
Formwork Builders — Field Proxy

Wraps the component builder a manifest builder factory returns. Every call
that changes the component builder re-emits the whole field, so the store
always holds the latest state under the same field id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from formwork.kernel.errors import BuilderFactoryMissingError, ComponentNotFoundError, InvalidArgumentError
from formwork.kernel.types import SLOT_FIELD_WRAPPER

if TYPE_CHECKING:
    from formwork.kernel.form import Form

# builder methods apply_context never calls with a single value
_NOT_CONTEXT_SETTERS = {"set", "to_dict", "attribute"}


def create_component_builder(form: Form, field_id: str, label: str, component: str) -> Any:
    """Instantiate the component builder for an alias via the manifest."""
    if not field_id:
        raise InvalidArgumentError("Field id cannot be empty.")
    factory = form.manifest.builder_factories().get(component)
    if factory is None:
        if not form.manifest.has(component):
            raise ComponentNotFoundError(f'Field "{field_id}" uses unknown component "{component}".')
        raise BuilderFactoryMissingError(
            f'Field "{field_id}" uses component "{component}" which has no registered builder factory.'
        )
    return factory(field_id, label)


class FieldBuilder:
    """Fluent proxy over a component builder, bound to one section or group."""

    def __init__(
        self,
        parent: Any,
        form: Form,
        builder: Any,
        *,
        section_id: str,
        group_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self._parent = parent
        self._form = form
        self._builder = builder
        self._section_id = section_id
        self._group_id = group_id
        self._pending_context: dict[str, Any] = {}
        self._hooks: dict[str, Any] = {}
        if context:
            self._merge_context(context)
        self._emit()

    @property
    def field_id(self) -> str:
        return self._builder.get_id()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        target = getattr(self._builder, name)
        if not callable(target):
            return target

        def proxy(*args: Any, **kwargs: Any) -> Any:
            result = target(*args, **kwargs)
            if result is self._builder:
                self._emit()
                return self
            return result

        return proxy

    # -----------------------------------------------------------------------
    # Field-level settings
    # -----------------------------------------------------------------------

    def template(self, template_key: str) -> FieldBuilder:
        """Override the field-wrapper template for this field only."""
        self._form.update(
            "template_override",
            {
                "element_type": "field",
                "element_id": self.field_id,
                "overrides": {SLOT_FIELD_WRAPPER: template_key},
            },
        )
        return self

    def before(self, callback: Any) -> FieldBuilder:
        self._hooks["before"] = callback
        self._emit()
        return self

    def after(self, callback: Any) -> FieldBuilder:
        self._hooks["after"] = callback
        self._emit()
        return self

    def style(self, style: Any) -> FieldBuilder:
        self._hooks["style"] = style
        self._emit()
        return self

    def apply_context(self, context: dict[str, Any]) -> FieldBuilder:
        """Merge keys into the component context instead of replacing it."""
        self._merge_context(context)
        self._emit()
        return self

    def end_field(self) -> Any:
        return self._parent

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _merge_context(self, context: dict[str, Any]) -> None:
        for key, value in context.items():
            if value is None:
                continue
            method = getattr(self._builder, key, None)
            if callable(method) and key not in _NOT_CONTEXT_SETTERS and not key.startswith(("get_", "_")):
                method(value)
            else:
                self._pending_context[key] = value

    def _emit(self) -> None:
        data = self._builder.to_dict()
        field_data: dict[str, Any] = {
            "id": data["id"],
            "label": data["label"],
            "component": data["component"],
            "component_context": {**data.get("component_context", {}), **self._pending_context},
            **self._hooks,
        }
        if data.get("order") is not None:
            field_data["order"] = data["order"]

        payload: dict[str, Any] = {
            "container_id": self._form.form_id,
            "section_id": self._section_id,
            "field_data": field_data,
        }
        if self._group_id is None:
            self._form.update("field", payload)
        else:
            payload["group_id"] = self._group_id
            self._form.update("group_field", payload)
