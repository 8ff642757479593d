"""
Formwork Kernel — Render Service

Walks the state store for one container and renders it through the session:

  root-wrapper
    section-wrapper            (sections by order, index)
      group-wrapper | fieldset-wrapper   (groups by order, index)
        field-wrapper ← component
      field-wrapper ← component          (section-level fields)
    submit-controls-wrapper ← controls

Hooks, description callbacks and callable styles run in place. Errors they
raise propagate; only Form.build() turns failures into a notice.
"""

from __future__ import annotations

from html import escape as _html_escape
from typing import Any

from formwork.kernel.schema import ValidationOutcome
from formwork.kernel.session import FormsServiceSession, capture_output
from formwork.kernel.store import FormsStateStore
from formwork.kernel.types import (
    HR_COMPONENT,
    RAW_HTML_COMPONENT,
    SLOT_FIELD_WRAPPER,
    SLOT_FIELDSET_WRAPPER,
    SLOT_GROUP_WRAPPER,
    SLOT_ROOT_WRAPPER,
    SLOT_SECTION_WRAPPER,
    SLOT_SUBMIT_CONTROLS_WRAPPER,
    Field,
    Group,
    Section,
)


class FormsRenderService:
    """Tree traversal from store records to markup."""

    def __init__(self, store: FormsStateStore, session: FormsServiceSession) -> None:
        self.store = store
        self.session = session

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def render_form(
        self,
        container_id: str,
        values: dict[str, Any] | None = None,
        *,
        title: str = "",
        root_config: dict[str, Any] | None = None,
        outcome: ValidationOutcome | None = None,
    ) -> str:
        """Render one container. An outcome from validate() adds per-field messages and notices."""
        if values is None and outcome is not None:
            values = outcome.values
        values = dict(values or {})
        inner_html = "".join(
            self.render_section(container_id, section, values, outcome)
            for section in self.store.get_sections(container_id)
        )
        submit_html = self.render_submit_controls(container_id, values)
        return self.finalize_render(container_id, inner_html, submit_html, values, title, root_config)

    def finalize_render(
        self,
        container_id: str,
        inner_html: str,
        submit_controls_html: str,
        values: dict[str, Any],
        title: str = "",
        root_config: dict[str, Any] | None = None,
    ) -> str:
        config = {
            **(root_config or {}),
            "form_id": container_id,
            "title": title,
            "inner_html": inner_html,
            "submit_controls_html": submit_controls_html,
        }
        context = {"root_id": container_id, "container_id": container_id, "values": values}
        return self.session.render_element(SLOT_ROOT_WRAPPER, config, context)

    def render_section(
        self, container_id: str, section: Section, values: dict[str, Any], outcome: ValidationOutcome | None = None
    ) -> str:
        sid = section.section_id
        hook_ctx = self._hook_context(container_id, sid, values=values)

        parts = [
            self.render_group(container_id, sid, group, values, outcome)
            for group in self.store.get_groups(container_id, sid)
        ]
        parts += [
            self.render_field(container_id, sid, f, values, outcome=outcome)
            for f in self.store.get_fields(container_id, sid)
        ]

        config = {
            "title": section.title,
            "description_html": self._description(section.description),
            "before": self._hook(section.before, hook_ctx),
            "after": self._hook(section.after, hook_ctx),
            "css_class": self._css_class("formwork-section", section.style, hook_ctx),
            "inner_html": "".join(parts),
        }
        context = {"root_id": container_id, "container_id": container_id, "section_id": sid}
        return self.session.render_element(SLOT_SECTION_WRAPPER, config, context)

    def render_group(
        self,
        container_id: str,
        section_id: str,
        group: Group,
        values: dict[str, Any],
        outcome: ValidationOutcome | None = None,
    ) -> str:
        gid = group.group_id
        hook_ctx = self._hook_context(container_id, section_id, group_id=gid, values=values)
        inner_html = "".join(
            self.render_field(container_id, section_id, f, values, group_id=gid, outcome=outcome)
            for f in self.store.get_group_fields(container_id, section_id, gid)
        )

        base_class = "formwork-fieldset" if group.is_fieldset else "formwork-group"
        config: dict[str, Any] = {
            "group_id": gid,
            "title": group.title,
            "description_html": self._description(group.description),
            "required": group.required,
            "before": self._hook(group.before, hook_ctx),
            "after": self._hook(group.after, hook_ctx),
            "css_class": self._css_class(base_class, group.style, hook_ctx),
            "inner_html": inner_html,
        }
        if group.is_fieldset:
            config["fieldset_attributes"] = self._fieldset_attributes(group)

        slot = SLOT_FIELDSET_WRAPPER if group.is_fieldset else SLOT_GROUP_WRAPPER
        context = {"root_id": container_id, "container_id": container_id, "section_id": section_id, "group_id": gid}
        return self.session.render_element(slot, config, context)

    def render_field(
        self,
        container_id: str,
        section_id: str,
        field: Field,
        values: dict[str, Any],
        group_id: str | None = None,
        outcome: ValidationOutcome | None = None,
    ) -> str:
        fid = field.field_id
        value = values.get(fid, field.component_context.get("default"))
        hook_ctx = self._hook_context(container_id, section_id, group_id=group_id, field_id=fid, values=values)
        hook_ctx["value"] = value
        before = self._hook(field.before, hook_ctx)
        after = self._hook(field.after, hook_ctx)

        if field.component == RAW_HTML_COMPONENT:
            content = field.component_context.get("content", "")
            markup = capture_output(content, hook_ctx) if callable(content) else str(content)
            return before + markup + after
        if field.component == HR_COMPONENT:
            css_class = self._css_class("formwork-divider", field.style, hook_ctx)
            return f'{before}<hr class="{_html_escape(css_class)}">{after}'

        warnings = list(outcome.messages.get(fid, [])) if outcome is not None else []
        notices = list(outcome.notices.get(fid, [])) if outcome is not None else []
        css_class = self._css_class("formwork-field", field.style, hook_ctx)
        if warnings:
            css_class += " formwork-field--invalid"

        component_context = {
            **field.component_context,
            "id": fid,
            "name": fid,
            "label": field.label,
            "value": value,
            "validation_warnings": warnings,
            "display_notices": notices,
        }
        component_html = self.session.render_field_component(field.component, fid, field.label, component_context, values)

        config = {
            "field_id": fid,
            "label": field.label,
            "component": field.component,
            "component_html": component_html,
            "description": field.component_context.get("description", ""),
            "required": bool(field.component_context.get("required")),
            "before": before,
            "after": after,
            "css_class": css_class,
            "validation_warnings": warnings,
            "has_validation_warnings": bool(warnings),
            "display_notices": notices,
            "has_display_notices": bool(notices),
        }
        context = {
            "root_id": container_id,
            "container_id": container_id,
            "section_id": section_id,
            "group_id": group_id or "",
            "field_id": fid,
        }
        return self.session.render_element(SLOT_FIELD_WRAPPER, config, context)

    def render_submit_controls(self, container_id: str, values: dict[str, Any]) -> str:
        zone = self.store.get_submit_controls(container_id)
        if zone is None:
            return ""
        hook_ctx = self._hook_context(container_id, "", values=values)
        controls_html = "".join(
            self.session.render_component(
                control.component,
                {
                    **control.component_context,
                    "id": control.id,
                    "name": control.id,
                    "field_id": control.id,
                    "label": control.label,
                },
            )
            for control in zone.controls
        )
        config = {
            "zone_id": zone.zone_id,
            "controls_html": controls_html,
            "before": self._hook(zone.before, hook_ctx),
            "after": self._hook(zone.after, hook_ctx),
        }
        context = {"root_id": container_id, "container_id": container_id, "zone_id": zone.zone_id}
        return self.session.render_element(SLOT_SUBMIT_CONTROLS_WRAPPER, config, context)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    @staticmethod
    def _hook_context(
        container_id: str,
        section_id: str,
        *,
        group_id: str | None = None,
        field_id: str = "",
        values: dict[str, Any],
    ) -> dict[str, Any]:
        return {
            "field_id": field_id,
            "container_id": container_id,
            "root_id": container_id,
            "section_id": section_id,
            "group_id": group_id or "",
            "value": None,
            "values": values,
        }

    @staticmethod
    def _hook(hook: Any, ctx: dict[str, Any]) -> str:
        if hook is None:
            return ""
        return capture_output(hook, dict(ctx))

    @staticmethod
    def _description(description: Any) -> str:
        if description is None:
            return ""
        if callable(description):
            return capture_output(description)
        return _html_escape(str(description))

    @staticmethod
    def _css_class(base: str, style: Any, ctx: dict[str, Any]) -> str:
        if callable(style):
            style = style(dict(ctx))
        token = str(style).strip() if style else ""
        return f"{base} {base}--{token}" if token else base

    @staticmethod
    def _fieldset_attributes(group: Group) -> str:
        attrs = ""
        if group.name:
            attrs += f' name="{_html_escape(group.name)}"'
        if group.form:
            attrs += f' form="{_html_escape(group.form)}"'
        if group.disabled:
            attrs += " disabled"
        return attrs
