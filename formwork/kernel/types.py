"""
Formwork Kernel — Shared Types

Data classes used across events, router, store, overrides, session and render.
These are the contracts that bind the kernel together.

Three families:
- payload records (SectionData, GroupData, FieldData): what an event carries.
  An attribute left as None means "not supplied" and keeps the stored value.
- store records (Section, Group, Field, Control, SubmitZone): the flat tables.
- builder events: one dataclass per recognized event name, plus CustomEvent
  for anything the kernel does not know.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

# ---------------------------------------------------------------------------
# Callback shapes
# ---------------------------------------------------------------------------

# before/after hooks: receive the minimal render context, return (or print) markup
Hook = Callable[[dict[str, Any]], Any]
# section/group description callbacks take no arguments
DescriptionCallback = Callable[[], Any]
# root render callbacks receive the merged element payload
RootCallback = Callable[[dict[str, Any]], Any]
# style may be a token or a callable evaluated with the render context
Style = str | Callable[[dict[str, Any]], Any]

# ---------------------------------------------------------------------------
# Template slots and element types
# ---------------------------------------------------------------------------

ELEMENT_TYPES: set[str] = {"root", "section", "group", "field"}

GROUP_TYPES: set[str] = {"group", "fieldset"}

SLOT_ROOT_WRAPPER = "root-wrapper"
SLOT_SECTION_WRAPPER = "section-wrapper"
SLOT_GROUP_WRAPPER = "group-wrapper"
SLOT_FIELDSET_WRAPPER = "fieldset-wrapper"
SLOT_FIELD_WRAPPER = "field-wrapper"
SLOT_SUBMIT_CONTROLS_WRAPPER = "submit-controls-wrapper"

# Library fallbacks, consulted after every override tier misses
BASE_FALLBACKS: dict[str, str] = {
    "root-wrapper": "layout.container.root-wrapper",
    "root": "layout.container.root-wrapper",
    "section-wrapper": "layout.zone.section-wrapper",
    "section": "layout.zone.section-wrapper",
    "group-wrapper": "layout.zone.group-wrapper",
    "group": "layout.zone.group-wrapper",
    "fieldset-wrapper": "layout.field.fieldset-wrapper",
    "field-wrapper": "layout.field.field-wrapper",
    "field": "layout.field.field-wrapper",
    "submit-controls-wrapper": "layout.zone.submit-controls-wrapper",
}

EMERGENCY_FALLBACK = "layout.container.root-wrapper"

DEFAULT_SUBMIT_ZONE = "primary-controls"

# Pseudo-components rendered by the kernel itself, never through the manifest
RAW_HTML_COMPONENT = "_raw_html"
HR_COMPONENT = "_hr"
PSEUDO_COMPONENTS: set[str] = {RAW_HTML_COMPONENT, HR_COMPONENT}

COMPONENT_ALIAS_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+$")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class Warning:
    """A non-fatal issue encountered while applying an update."""

    code: str
    message: str
    details: dict[str, Any] | None = None


@dataclass
class DispatchResult:
    """
    Result of routing one event.
    handled is False when the event reached the fallback.
    """

    name: str
    handled: bool
    warnings: list[Warning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Payload records
# ---------------------------------------------------------------------------


@dataclass
class SectionData:
    title: str | None = None
    description: str | DescriptionCallback | None = None
    before: Hook | None = None
    after: Hook | None = None
    order: int | None = None
    style: Style | None = None


@dataclass
class FieldData:
    id: str
    component: str
    label: str | None = None
    component_context: dict[str, Any] = field(default_factory=dict)
    order: int | None = None
    before: Hook | None = None
    after: Hook | None = None
    style: Style | None = None


@dataclass
class GroupData:
    title: str | None = None
    description: str | DescriptionCallback | None = None
    before: Hook | None = None
    after: Hook | None = None
    order: int | None = None
    style: Style | None = None
    required: bool | None = None
    type: str | None = None
    # fieldset-only
    form: str | None = None
    name: str | None = None
    disabled: bool | None = None
    fields: list[FieldData] = field(default_factory=list)


@dataclass
class ControlData:
    id: str
    label: str
    component: str
    component_context: dict[str, Any] = field(default_factory=dict)
    order: int = 0


# ---------------------------------------------------------------------------
# Store records
# ---------------------------------------------------------------------------


@dataclass
class Section:
    """A section within a container."""

    container_id: str
    section_id: str
    index: int
    title: str = ""
    description: str | DescriptionCallback | None = None
    before: Hook | None = None
    after: Hook | None = None
    order: int = 0
    style: Style | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "container_id": self.container_id,
            "section_id": self.section_id,
            "index": self.index,
            "title": self.title,
            "description": self.description,
            "before": self.before,
            "after": self.after,
            "order": self.order,
            "style": self.style,
        }


@dataclass
class Group:
    """A group or fieldset within a section."""

    container_id: str
    section_id: str
    group_id: str
    index: int
    title: str = ""
    description: str | DescriptionCallback | None = None
    before: Hook | None = None
    after: Hook | None = None
    order: int = 0
    style: Style | None = None
    required: bool = False
    type: str = "group"
    form: str = ""
    name: str = ""
    disabled: bool = False

    @property
    def is_fieldset(self) -> bool:
        return self.type == "fieldset"

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "container_id": self.container_id,
            "section_id": self.section_id,
            "group_id": self.group_id,
            "index": self.index,
            "title": self.title,
            "description": self.description,
            "before": self.before,
            "after": self.after,
            "order": self.order,
            "style": self.style,
            "required": self.required,
            "type": self.type,
        }
        if self.is_fieldset:
            d["form"] = self.form
            d["name"] = self.name
            d["disabled"] = self.disabled
        return d


@dataclass
class Field:
    """A field within a section, or within a group when group_id is set."""

    container_id: str
    section_id: str
    field_id: str
    index: int
    component: str
    group_id: str | None = None
    label: str = ""
    component_context: dict[str, Any] = field(default_factory=dict)
    order: int = 0
    before: Hook | None = None
    after: Hook | None = None
    style: Style | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.field_id,
            "label": self.label,
            "component": self.component,
            "component_context": dict(self.component_context),
            "order": self.order,
            "index": self.index,
            "before": self.before,
            "after": self.after,
            "style": self.style,
        }


@dataclass
class Control:
    """One submit control (button or field) in a zone."""

    id: str
    label: str
    component: str
    component_context: dict[str, Any] = field(default_factory=dict)
    order: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "component": self.component,
            "component_context": dict(self.component_context),
            "order": self.order,
        }


@dataclass
class SubmitZone:
    """The submit-controls zone of a container."""

    container_id: str
    zone_id: str
    before: Hook | None = None
    after: Hook | None = None
    controls: list[Control] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Builder events
# ---------------------------------------------------------------------------


@dataclass
class SectionEvent:
    name: ClassVar[str] = "section"

    container_id: str
    section_id: str
    data: SectionData


@dataclass
class SectionMetadataEvent:
    name: ClassVar[str] = "section_metadata"

    container_id: str
    section_id: str
    data: SectionData


@dataclass
class FieldEvent:
    name: ClassVar[str] = "field"

    container_id: str
    section_id: str
    field: FieldData


@dataclass
class GroupEvent:
    name: ClassVar[str] = "group"

    container_id: str
    section_id: str
    group_id: str
    data: GroupData


@dataclass
class GroupFieldEvent:
    name: ClassVar[str] = "group_field"

    container_id: str
    section_id: str
    group_id: str
    field: FieldData


@dataclass
class GroupMetadataEvent:
    name: ClassVar[str] = "group_metadata"

    container_id: str
    section_id: str
    group_id: str
    data: GroupData


@dataclass
class TemplateOverrideEvent:
    """
    Per-element template overrides.
    has_callback distinguishes "callback: None" (unset) from no callback key.
    """

    name: ClassVar[str] = "template_override"

    element_type: str
    element_id: str
    overrides: dict[str, str] = field(default_factory=dict)
    callback: RootCallback | None = None
    has_callback: bool = False
    zone_id: str | None = None


@dataclass
class FormDefaultsOverrideEvent:
    name: ClassVar[str] = "form_defaults_override"

    overrides: dict[str, str] = field(default_factory=dict)


@dataclass
class SubmitControlsZoneEvent:
    name: ClassVar[str] = "submit_controls_zone"

    container_id: str
    zone_id: str
    before: Hook | None = None
    after: Hook | None = None


@dataclass
class SubmitControlsSetEvent:
    """Controls arrive raw; malformed entries are skipped by the handler."""

    name: ClassVar[str] = "submit_controls_set"

    container_id: str
    zone_id: str
    controls: list[Any] = field(default_factory=list)


@dataclass
class SectionCleanupEvent:
    name: ClassVar[str] = "section_cleanup"

    section_id: str


@dataclass
class CustomEvent:
    """Any event name the kernel does not recognize."""

    name: str
    data: dict[str, Any] = field(default_factory=dict)


BuilderEvent = (
    SectionEvent
    | SectionMetadataEvent
    | FieldEvent
    | GroupEvent
    | GroupFieldEvent
    | GroupMetadataEvent
    | TemplateOverrideEvent
    | FormDefaultsOverrideEvent
    | SubmitControlsZoneEvent
    | SubmitControlsSetEvent
    | SectionCleanupEvent
    | CustomEvent
)
