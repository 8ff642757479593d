"""
Formwork Kernel — Event Parsing

Turns the raw (name, data) wire format emitted by builders into typed
builder events. Missing identifiers, non-map contexts and blank template
keys raise InvalidArgumentError. Attribute values that cannot be coerced
are dropped with an UNCOERCIBLE_VALUE warning and treated as not supplied.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from formwork.kernel.errors import InvalidArgumentError
from formwork.kernel.types import (
    ELEMENT_TYPES,
    GROUP_TYPES,
    BuilderEvent,
    ControlData,
    CustomEvent,
    FieldData,
    FieldEvent,
    FormDefaultsOverrideEvent,
    GroupData,
    GroupEvent,
    GroupFieldEvent,
    GroupMetadataEvent,
    SectionCleanupEvent,
    SectionData,
    SectionEvent,
    SectionMetadataEvent,
    SubmitControlsSetEvent,
    SubmitControlsZoneEvent,
    TemplateOverrideEvent,
    Warning,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_event(name: str, data: Any, warnings: list[Warning] | None = None) -> BuilderEvent:
    """
    Build a typed event from a raw builder payload.

    Recoverable problems are appended to `warnings` when a list is given.
    Unknown names become a CustomEvent carrying the untouched payload.
    """
    sink: list[Warning] = warnings if warnings is not None else []
    parser = _PARSERS.get(name)
    if parser is None:
        return CustomEvent(name=name, data=dict(data) if isinstance(data, Mapping) else {"value": data})
    if not isinstance(data, Mapping):
        raise InvalidArgumentError(f'Update "{name}" expects a map payload, got {type(data).__name__}.')
    return parser(data, sink)


def make_update(name: str, **data: Any) -> tuple[str, dict[str, Any]]:
    """
    Build a raw (name, data) pair concisely, for scripted update streams.
    """
    return name, data


def parse_field_data(raw: Any, warnings: list[Warning], context: str = "field") -> FieldData:
    """Coerce one field record. Missing id/component or a non-map context is fatal."""
    if not isinstance(raw, Mapping):
        raise InvalidArgumentError(f"{context}: field data must be a map, got {type(raw).__name__}.")
    field_id = _require_id(raw, "id", context)
    component = _coerce_str(raw.get("component"))
    if not component:
        raise InvalidArgumentError(f'{context}: field "{field_id}" is missing a component alias.')

    ctx = raw.get("component_context", {})
    if ctx is None:
        ctx = {}
    if not isinstance(ctx, Mapping):
        raise InvalidArgumentError(
            f'{context}: field "{field_id}" component_context must be a map, got {type(ctx).__name__}.'
        )

    return FieldData(
        id=field_id,
        component=component,
        label=_optional_str(raw, "label", warnings, context),
        component_context=dict(ctx),
        order=_optional_int(raw, "order", warnings, context),
        before=_optional_callable(raw, "before", warnings, context),
        after=_optional_callable(raw, "after", warnings, context),
        style=_optional_style(raw, warnings, context),
    )


def parse_control(raw: Any, position: int, warnings: list[Warning]) -> ControlData | None:
    """
    Coerce one submit control entry.
    Malformed entries are skipped with a warning and yield None.
    """
    if not isinstance(raw, Mapping):
        warnings.append(
            Warning(
                code="MALFORMED_CONTROL",
                message=f"submit_controls_set: skipping control #{position}, expected a map",
                details={"position": position},
            )
        )
        return None

    control_id = _coerce_str(raw.get("id"))
    component = _coerce_str(raw.get("component"))
    ctx = raw.get("component_context", {}) or {}
    if not control_id or not component or not isinstance(ctx, Mapping):
        warnings.append(
            Warning(
                code="MALFORMED_CONTROL",
                message=f"submit_controls_set: skipping control #{position}, missing id/component or bad context",
                details={"position": position, "id": control_id},
            )
        )
        return None

    order = _optional_int(raw, "order", warnings, "submit_controls_set")
    return ControlData(
        id=control_id,
        label=_coerce_str(raw.get("label")) or "",
        component=component,
        component_context=dict(ctx),
        order=order if order is not None else 0,
    )


# ---------------------------------------------------------------------------
# Per-event parsers
# ---------------------------------------------------------------------------


def _parse_section(data: Mapping[str, Any], warnings: list[Warning]) -> SectionEvent:
    return SectionEvent(
        container_id=_require_id(data, "container_id", "section"),
        section_id=_require_id(data, "section_id", "section"),
        data=_section_data(_nested(data, "section_data", "section"), warnings, "section"),
    )


def _parse_section_metadata(data: Mapping[str, Any], warnings: list[Warning]) -> SectionMetadataEvent:
    key = "group_data" if "group_data" in data else "section_data"
    return SectionMetadataEvent(
        container_id=_require_id(data, "container_id", "section_metadata"),
        section_id=_require_id(data, "section_id", "section_metadata"),
        data=_section_data(_nested(data, key, "section_metadata"), warnings, "section_metadata"),
    )


def _parse_field(data: Mapping[str, Any], warnings: list[Warning]) -> FieldEvent:
    return FieldEvent(
        container_id=_require_id(data, "container_id", "field"),
        section_id=_require_id(data, "section_id", "field"),
        field=parse_field_data(data.get("field_data"), warnings, "field"),
    )


def _parse_group(data: Mapping[str, Any], warnings: list[Warning]) -> GroupEvent:
    return GroupEvent(
        container_id=_require_id(data, "container_id", "group"),
        section_id=_require_id(data, "section_id", "group"),
        group_id=_require_id(data, "group_id", "group"),
        data=_group_data(_nested(data, "group_data", "group"), warnings, "group", with_fields=True),
    )


def _parse_group_field(data: Mapping[str, Any], warnings: list[Warning]) -> GroupFieldEvent:
    return GroupFieldEvent(
        container_id=_require_id(data, "container_id", "group_field"),
        section_id=_require_id(data, "section_id", "group_field"),
        group_id=_require_id(data, "group_id", "group_field"),
        field=parse_field_data(data.get("field_data"), warnings, "group_field"),
    )


def _parse_group_metadata(data: Mapping[str, Any], warnings: list[Warning]) -> GroupMetadataEvent:
    return GroupMetadataEvent(
        container_id=_require_id(data, "container_id", "group_metadata"),
        section_id=_require_id(data, "section_id", "group_metadata"),
        group_id=_require_id(data, "group_id", "group_metadata"),
        data=_group_data(_nested(data, "group_data", "group_metadata"), warnings, "group_metadata"),
    )


def _parse_template_override(data: Mapping[str, Any], warnings: list[Warning]) -> TemplateOverrideEvent:
    element_type = _require_id(data, "element_type", "template_override")
    if element_type not in ELEMENT_TYPES:
        raise InvalidArgumentError(
            f'template_override: unknown element_type "{element_type}"; expected one of {sorted(ELEMENT_TYPES)}.'
        )
    element_id = _require_id(data, "element_id", "template_override")

    raw_overrides = data.get("overrides", {})
    overrides: dict[str, str] = {}
    if raw_overrides is None:
        raw_overrides = {}
    if isinstance(raw_overrides, Mapping):
        overrides = _template_map(raw_overrides, "template_override")
    else:
        warnings.append(
            Warning(
                code="MALFORMED_OVERRIDES",
                message="template_override: overrides must be a map; ignoring them",
                details={"element_type": element_type, "element_id": element_id},
            )
        )

    has_callback = "callback" in data
    callback = data.get("callback")
    if callback is not None and not callable(callback):
        warnings.append(
            Warning(
                code="UNCOERCIBLE_VALUE",
                message="template_override: callback is not callable; ignoring it",
                details={"element_id": element_id},
            )
        )
        has_callback = False
        callback = None

    zone_id = _coerce_str(data.get("zone_id")) or None
    return TemplateOverrideEvent(
        element_type=element_type,
        element_id=element_id,
        overrides=overrides,
        callback=callback,
        has_callback=has_callback,
        zone_id=zone_id,
    )


def _parse_form_defaults_override(data: Mapping[str, Any], warnings: list[Warning]) -> FormDefaultsOverrideEvent:
    raw = data.get("overrides", {})
    if not isinstance(raw, Mapping):
        warnings.append(
            Warning(
                code="MALFORMED_OVERRIDES",
                message="form_defaults_override: overrides must be a map; ignoring them",
            )
        )
        raw = {}
    return FormDefaultsOverrideEvent(overrides=_template_map(raw, "form_defaults_override"))


def _parse_submit_controls_zone(data: Mapping[str, Any], warnings: list[Warning]) -> SubmitControlsZoneEvent:
    return SubmitControlsZoneEvent(
        container_id=_require_id(data, "container_id", "submit_controls_zone"),
        zone_id=_require_id(data, "zone_id", "submit_controls_zone"),
        before=_optional_callable(data, "before", warnings, "submit_controls_zone"),
        after=_optional_callable(data, "after", warnings, "submit_controls_zone"),
    )


def _parse_submit_controls_set(data: Mapping[str, Any], warnings: list[Warning]) -> SubmitControlsSetEvent:
    controls = data.get("controls", [])
    if not isinstance(controls, list | tuple):
        warnings.append(
            Warning(
                code="MALFORMED_CONTROL",
                message="submit_controls_set: controls must be a list; treating as empty",
            )
        )
        controls = []
    return SubmitControlsSetEvent(
        container_id=_require_id(data, "container_id", "submit_controls_set"),
        zone_id=_require_id(data, "zone_id", "submit_controls_set"),
        controls=list(controls),
    )


def _parse_section_cleanup(data: Mapping[str, Any], warnings: list[Warning]) -> SectionCleanupEvent:
    return SectionCleanupEvent(section_id=_require_id(data, "section_id", "section_cleanup"))


_PARSERS: dict[str, Any] = {
    "section": _parse_section,
    "section_metadata": _parse_section_metadata,
    "field": _parse_field,
    "group": _parse_group,
    "group_field": _parse_group_field,
    "group_metadata": _parse_group_metadata,
    "template_override": _parse_template_override,
    "form_defaults_override": _parse_form_defaults_override,
    "submit_controls_zone": _parse_submit_controls_zone,
    "submit_controls_set": _parse_submit_controls_set,
    "section_cleanup": _parse_section_cleanup,
}


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------


def _section_data(raw: Mapping[str, Any], warnings: list[Warning], context: str) -> SectionData:
    return SectionData(
        title=_title(raw, warnings, context),
        description=_description(raw, warnings, context),
        before=_optional_callable(raw, "before", warnings, context),
        after=_optional_callable(raw, "after", warnings, context),
        order=_optional_int(raw, "order", warnings, context),
        style=_optional_style(raw, warnings, context),
    )


def _group_data(
    raw: Mapping[str, Any], warnings: list[Warning], context: str, with_fields: bool = False
) -> GroupData:
    group_type = _optional_str(raw, "type", warnings, context)
    if group_type is not None and group_type not in GROUP_TYPES:
        warnings.append(
            Warning(
                code="UNCOERCIBLE_VALUE",
                message=f'{context}: unknown group type "{group_type}"; keeping the stored type',
                details={"key": "type", "value": group_type},
            )
        )
        group_type = None

    fields: list[FieldData] = []
    if with_fields:
        raw_fields = raw.get("fields", [])
        if isinstance(raw_fields, Mapping):
            raw_fields = list(raw_fields.values())
        if not isinstance(raw_fields, list | tuple):
            warnings.append(
                Warning(
                    code="UNCOERCIBLE_VALUE",
                    message=f"{context}: fields must be a list; ignoring them",
                    details={"key": "fields"},
                )
            )
            raw_fields = []
        fields = [parse_field_data(item, warnings, context) for item in raw_fields]

    return GroupData(
        title=_title(raw, warnings, context),
        description=_description(raw, warnings, context),
        before=_optional_callable(raw, "before", warnings, context),
        after=_optional_callable(raw, "after", warnings, context),
        order=_optional_int(raw, "order", warnings, context),
        style=_optional_style(raw, warnings, context),
        required=_optional_bool(raw, "required"),
        type=group_type,
        form=_optional_str(raw, "form", warnings, context),
        name=_optional_str(raw, "name", warnings, context),
        disabled=_optional_bool(raw, "disabled"),
        fields=fields,
    )


def _nested(data: Mapping[str, Any], key: str, context: str) -> Mapping[str, Any]:
    value = data.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidArgumentError(f"{context}: {key} must be a map, got {type(value).__name__}.")
    return value


def _template_map(raw: Mapping[str, Any], context: str) -> dict[str, str]:
    result: dict[str, str] = {}
    for slot, key in raw.items():
        slot_name = _coerce_str(slot)
        template_key = _coerce_str(key)
        if not slot_name:
            raise InvalidArgumentError(f"{context}: template slot names cannot be empty.")
        if not template_key:
            raise InvalidArgumentError(f'{context}: template key for slot "{slot_name}" cannot be empty.')
        result[slot_name] = template_key
    return result


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _coerce_str(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, int | float):
        return str(value)
    return ""


def _require_id(data: Mapping[str, Any], key: str, context: str) -> str:
    value = _coerce_str(data.get(key))
    if not value:
        raise InvalidArgumentError(f'{context}: missing required identifier "{key}".')
    return value


def _uncoercible(warnings: list[Warning], context: str, key: str, value: Any) -> None:
    warnings.append(
        Warning(
            code="UNCOERCIBLE_VALUE",
            message=f'{context}: cannot coerce "{key}" ({type(value).__name__}); keeping the stored value',
            details={"key": key},
        )
    )


def _optional_str(data: Mapping[str, Any], key: str, warnings: list[Warning], context: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    _uncoercible(warnings, context, key, value)
    return None


def _optional_int(data: Mapping[str, Any], key: str, warnings: list[Warning], context: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        _uncoercible(warnings, context, key, value)
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    _uncoercible(warnings, context, key, value)
    return None


def _optional_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    return bool(value)


def _optional_callable(data: Mapping[str, Any], key: str, warnings: list[Warning], context: str) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if callable(value):
        return value
    _uncoercible(warnings, context, key, value)
    return None


def _optional_style(data: Mapping[str, Any], warnings: list[Warning], context: str) -> Any:
    value = data.get("style")
    if value is None:
        return None
    if isinstance(value, str) or callable(value):
        return value
    _uncoercible(warnings, context, "style", value)
    return None


def _title(data: Mapping[str, Any], warnings: list[Warning], context: str) -> str | None:
    # builders send "heading", older callers "title"
    key = "heading" if data.get("heading") is not None else "title"
    return _optional_str(data, key, warnings, context)


def _description(data: Mapping[str, Any], warnings: list[Warning], context: str) -> Any:
    key = "description_cb" if data.get("description_cb") is not None else "description"
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str) or callable(value):
        return value
    _uncoercible(warnings, context, key, value)
    return None
