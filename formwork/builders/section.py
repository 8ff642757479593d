"""
Formwork Builders — Sections and Groups

Each builder call becomes one update event on the owning Form. Metadata
setters send only the key they change; the store keeps everything else.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from formwork.builders.field import FieldBuilder, create_component_builder
from formwork.kernel.types import (
    HR_COMPONENT,
    RAW_HTML_COMPONENT,
    SLOT_FIELD_WRAPPER,
    SLOT_FIELDSET_WRAPPER,
    SLOT_GROUP_WRAPPER,
    SLOT_SECTION_WRAPPER,
)

if TYPE_CHECKING:
    from formwork.kernel.form import Form


class _ContainerBuilder:
    """Shared field/raw_html/hr plumbing for sections and groups."""

    _form: Form
    _section_id: str
    _group_id: str | None = None
    _pseudo_count: int = 0

    def _next_pseudo_id(self, prefix: str) -> str:
        self._pseudo_count += 1
        scope = self._group_id or self._section_id
        return f"{prefix}_{scope}_{self._pseudo_count}"

    def field(
        self, field_id: str, label: str, component: str, context: dict[str, Any] | None = None
    ) -> FieldBuilder:
        builder = create_component_builder(self._form, field_id, label, component)
        return FieldBuilder(
            self,
            self._form,
            builder,
            section_id=self._section_id,
            group_id=self._group_id,
            context=context,
        )

    def raw_html(self, content: Any, field_id: str | None = None, order: int | None = None) -> Any:
        """Insert literal markup (a string, or a callable receiving the hook context)."""
        self._emit_pseudo(field_id or self._next_pseudo_id("raw_html"), RAW_HTML_COMPONENT, {"content": content}, order)
        return self

    def hr(self, field_id: str | None = None, order: int | None = None, style: str | None = None) -> Any:
        self._emit_pseudo(field_id or self._next_pseudo_id("hr"), HR_COMPONENT, {}, order, style)
        return self

    def _emit_pseudo(
        self, field_id: str, component: str, context: dict[str, Any], order: int | None, style: str | None = None
    ) -> None:
        field_data: dict[str, Any] = {"id": field_id, "label": "", "component": component, "component_context": context}
        if order is not None:
            field_data["order"] = order
        if style is not None:
            field_data["style"] = style
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

    def _override(self, element_type: str, element_id: str, slot: str, template_key: str) -> None:
        self._form.update(
            "template_override",
            {"element_type": element_type, "element_id": element_id, "overrides": {slot: template_key}},
        )


class SectionBuilder(_ContainerBuilder):
    def __init__(self, form: Form, section_id: str, heading: str = "", description: Any = None) -> None:
        self._form = form
        self._section_id = section_id
        section_data: dict[str, Any] = {"heading": heading}
        if description is not None:
            section_data["description_cb"] = description
        form.update(
            "section",
            {"container_id": form.form_id, "section_id": section_id, "section_data": section_data},
        )

    @property
    def section_id(self) -> str:
        return self._section_id

    def _metadata(self, **data: Any) -> SectionBuilder:
        self._form.update(
            "section_metadata",
            {"container_id": self._form.form_id, "section_id": self._section_id, "group_data": data},
        )
        return self

    def heading(self, heading: str) -> SectionBuilder:
        return self._metadata(heading=heading)

    def description(self, description: Any) -> SectionBuilder:
        return self._metadata(description=description)

    def order(self, order: int) -> SectionBuilder:
        return self._metadata(order=order)

    def style(self, style: Any) -> SectionBuilder:
        return self._metadata(style=style)

    def before(self, callback: Any) -> SectionBuilder:
        return self._metadata(before=callback)

    def after(self, callback: Any) -> SectionBuilder:
        return self._metadata(after=callback)

    # -- templates --

    def template(self, template_key: str) -> SectionBuilder:
        self._override("section", self._section_id, SLOT_SECTION_WRAPPER, template_key)
        return self

    section_template = template

    def field_template(self, template_key: str) -> SectionBuilder:
        """field-wrapper for every field in this section, unless a field overrides it."""
        self._override("section", self._section_id, SLOT_FIELD_WRAPPER, template_key)
        return self

    def group_template(self, template_key: str) -> SectionBuilder:
        self._override("section", self._section_id, SLOT_GROUP_WRAPPER, template_key)
        return self

    def fieldset_template(self, template_key: str) -> SectionBuilder:
        self._override("section", self._section_id, SLOT_FIELDSET_WRAPPER, template_key)
        return self

    # -- children --

    def group(self, group_id: str, heading: str = "", description: Any = None) -> GroupBuilder:
        return GroupBuilder(self, group_id, heading, description)

    def fieldset(
        self,
        group_id: str,
        heading: str = "",
        description: Any = None,
        *,
        form: str = "",
        name: str = "",
        disabled: bool = False,
    ) -> FieldsetBuilder:
        return FieldsetBuilder(self, group_id, heading, description, form=form, name=name, disabled=disabled)

    def end_section(self) -> Form:
        self._form.update("section_cleanup", {"section_id": self._section_id})
        return self._form

    def section(self, section_id: str, heading: str = "", description: Any = None) -> SectionBuilder:
        """Close this section and open a sibling."""
        return self.end_section().section(section_id, heading, description)


class GroupBuilder(_ContainerBuilder):
    group_type = "group"
    wrapper_slot = SLOT_GROUP_WRAPPER

    def __init__(
        self,
        section: SectionBuilder,
        group_id: str,
        heading: str = "",
        description: Any = None,
        **extra: Any,
    ) -> None:
        self._section = section
        self._form = section._form
        self._section_id = section.section_id
        self._group_id = group_id
        group_data: dict[str, Any] = {"heading": heading, "type": self.group_type, "fields": [], **extra}
        if description is not None:
            group_data["description_cb"] = description
        self._form.update("group", self._payload(group_data))

    @property
    def group_id(self) -> str:
        return self._group_id

    def _payload(self, group_data: dict[str, Any]) -> dict[str, Any]:
        return {
            "container_id": self._form.form_id,
            "section_id": self._section_id,
            "group_id": self._group_id,
            "group_data": group_data,
        }

    def _metadata(self, **data: Any) -> GroupBuilder:
        self._form.update("group_metadata", self._payload(data))
        return self

    def heading(self, heading: str) -> GroupBuilder:
        return self._metadata(heading=heading)

    def description(self, description: Any) -> GroupBuilder:
        return self._metadata(description=description)

    def order(self, order: int) -> GroupBuilder:
        return self._metadata(order=order)

    def style(self, style: Any) -> GroupBuilder:
        return self._metadata(style=style)

    def before(self, callback: Any) -> GroupBuilder:
        return self._metadata(before=callback)

    def after(self, callback: Any) -> GroupBuilder:
        return self._metadata(after=callback)

    def required(self, required: bool = True) -> GroupBuilder:
        return self._metadata(required=required)

    def template(self, template_key: str) -> GroupBuilder:
        self._override("group", self._group_id, self.wrapper_slot, template_key)
        return self

    def field_template(self, template_key: str) -> GroupBuilder:
        self._override("group", self._group_id, SLOT_FIELD_WRAPPER, template_key)
        return self

    def end_group(self) -> SectionBuilder:
        return self._section


class FieldsetBuilder(GroupBuilder):
    group_type = "fieldset"
    wrapper_slot = SLOT_FIELDSET_WRAPPER

    def form(self, form_id: str) -> FieldsetBuilder:
        return self._metadata(type=self.group_type, form=form_id)

    def name(self, name: str) -> FieldsetBuilder:
        return self._metadata(type=self.group_type, name=name)

    def disabled(self, disabled: bool = True) -> FieldsetBuilder:
        return self._metadata(type=self.group_type, disabled=disabled)

    def end_fieldset(self) -> SectionBuilder:
        return self._section
