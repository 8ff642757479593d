"""
Formwork Kernel — State Store

The canonical tree for one build/render pass, kept as flat tables keyed by
composite ids instead of nested maps:

  sections  (container_id, section_id)            → Section
  groups    (container_id, section_id, group_id)  → Group
  fields    (container_id, section_id, group_id | None, field_id) → Field
  zones     container_id                          → SubmitZone

Every entity carries an insertion index drawn from a per-kind counter that
only grows. Sorted accessors order by (order, index).
"""

from __future__ import annotations

import logging
from typing import Any

from formwork.kernel.types import (
    Control,
    ControlData,
    Field,
    FieldData,
    Group,
    GroupData,
    Section,
    SectionData,
    SubmitZone,
)

logger = logging.getLogger(__name__)

SectionKey = tuple[str, str]
GroupKey = tuple[str, str, str]
FieldKey = tuple[str, str, str | None, str]


def _sort_key(record: Section | Group | Field) -> tuple[int, int]:
    return (record.order, record.index)


class FormsStateStore:
    """Ordered, upsert-only storage for containers, sections, groups, fields and submit zones."""

    def __init__(self) -> None:
        self._containers: dict[str, int] = {}
        self._sections: dict[SectionKey, Section] = {}
        self._groups: dict[GroupKey, Group] = {}
        self._fields: dict[FieldKey, Field] = {}
        self._zones: dict[str, SubmitZone] = {}
        self._counters: dict[str, int] = {"container": 0, "section": 0, "group": 0, "field": 0}

    def _next_index(self, kind: str) -> int:
        index = self._counters[kind]
        self._counters[kind] = index + 1
        return index

    # -----------------------------------------------------------------------
    # Containers
    # -----------------------------------------------------------------------

    def ensure_container(self, container_id: str) -> int:
        if container_id not in self._containers:
            self._containers[container_id] = self._next_index("container")
        return self._containers[container_id]

    def containers(self) -> list[str]:
        return sorted(self._containers, key=self._containers.__getitem__)

    # -----------------------------------------------------------------------
    # Sections
    # -----------------------------------------------------------------------

    def has_section(self, container_id: str, section_id: str) -> bool:
        return (container_id, section_id) in self._sections

    def has_section_id(self, section_id: str) -> bool:
        """True if any container holds a section with this id."""
        return any(key[1] == section_id for key in self._sections)

    def get_section(self, container_id: str, section_id: str) -> Section | None:
        return self._sections.get((container_id, section_id))

    def ensure_section(self, container_id: str, section_id: str) -> Section:
        key = (container_id, section_id)
        section = self._sections.get(key)
        if section is None:
            self.ensure_container(container_id)
            section = Section(container_id=container_id, section_id=section_id, index=self._next_index("section"))
            self._sections[key] = section
        return section

    def set_section(self, container_id: str, section_id: str, data: SectionData) -> Section:
        """Upsert section metadata. Attributes left as None keep their stored value."""
        section = self.ensure_section(container_id, section_id)
        if data.title is not None:
            section.title = data.title
        if data.description is not None:
            section.description = data.description
        if data.before is not None:
            section.before = data.before
        if data.after is not None:
            section.after = data.after
        if data.order is not None:
            section.order = data.order
        if data.style is not None:
            section.style = data.style
        return section

    def get_sections(self, container_id: str) -> list[Section]:
        sections = [s for (cid, _), s in self._sections.items() if cid == container_id]
        return sorted(sections, key=_sort_key)

    # -----------------------------------------------------------------------
    # Groups
    # -----------------------------------------------------------------------

    def has_group(self, container_id: str, section_id: str, group_id: str) -> bool:
        return (container_id, section_id, group_id) in self._groups

    def get_group(self, container_id: str, section_id: str, group_id: str) -> Group | None:
        return self._groups.get((container_id, section_id, group_id))

    def ensure_group(self, container_id: str, section_id: str, group_id: str) -> Group:
        key = (container_id, section_id, group_id)
        group = self._groups.get(key)
        if group is None:
            self.ensure_section(container_id, section_id)
            group = Group(
                container_id=container_id,
                section_id=section_id,
                group_id=group_id,
                index=self._next_index("group"),
            )
            self._groups[key] = group
        return group

    def set_group(self, container_id: str, section_id: str, group_id: str, data: GroupData) -> Group:
        """
        Upsert group metadata, then upsert every listed field into the group.
        Fields already in the group but not listed are kept.
        """
        group = self.ensure_group(container_id, section_id, group_id)
        for attr in ("title", "description", "before", "after", "order", "style", "required", "type"):
            value = getattr(data, attr)
            if value is not None:
                setattr(group, attr, value)
        if group.is_fieldset:
            for attr in ("form", "name", "disabled"):
                value = getattr(data, attr)
                if value is not None:
                    setattr(group, attr, value)
        for field_data in data.fields:
            self.upsert_field(container_id, section_id, group_id, field_data)
        return group

    def get_groups(self, container_id: str, section_id: str) -> list[Group]:
        groups = [g for (cid, sid, _), g in self._groups.items() if cid == container_id and sid == section_id]
        return sorted(groups, key=_sort_key)

    # -----------------------------------------------------------------------
    # Fields
    # -----------------------------------------------------------------------

    def has_field(self, container_id: str, section_id: str, field_id: str, group_id: str | None = None) -> bool:
        return (container_id, section_id, group_id, field_id) in self._fields

    def get_field(
        self, container_id: str, section_id: str, field_id: str, group_id: str | None = None
    ) -> Field | None:
        return self._fields.get((container_id, section_id, group_id, field_id))

    def upsert_field(
        self, container_id: str, section_id: str, group_id: str | None, data: FieldData
    ) -> tuple[Field, bool]:
        """
        Insert or update a field keyed by its id within its parent scope.

        An existing field keeps its index. Its component and component_context
        are replaced outright; order changes only when the update supplies one;
        label, hooks and style keep their stored value when left as None.
        Returns (field, created).
        """
        key = (container_id, section_id, group_id, data.id)
        existing = self._fields.get(key)

        if existing is None:
            if group_id is None:
                self.ensure_section(container_id, section_id)
            else:
                self.ensure_group(container_id, section_id, group_id)
            created = Field(
                container_id=container_id,
                section_id=section_id,
                field_id=data.id,
                group_id=group_id,
                index=self._next_index("field"),
                component=data.component,
                label=data.label or "",
                component_context=dict(data.component_context),
                order=data.order if data.order is not None else 0,
                before=data.before,
                after=data.after,
                style=data.style,
            )
            self._fields[key] = created
            return created, True

        existing.component = data.component
        existing.component_context = dict(data.component_context)
        if data.order is not None:
            existing.order = data.order
        if data.label is not None:
            existing.label = data.label
        if data.before is not None:
            existing.before = data.before
        if data.after is not None:
            existing.after = data.after
        if data.style is not None:
            existing.style = data.style
        return existing, False

    def get_fields(self, container_id: str, section_id: str) -> list[Field]:
        """Section-level fields (not inside a group), sorted."""
        fields = [
            f
            for (cid, sid, gid, _), f in self._fields.items()
            if cid == container_id and sid == section_id and gid is None
        ]
        return sorted(fields, key=_sort_key)

    def get_group_fields(self, container_id: str, section_id: str, group_id: str) -> list[Field]:
        fields = [
            f
            for (cid, sid, gid, _), f in self._fields.items()
            if cid == container_id and sid == section_id and gid == group_id
        ]
        return sorted(fields, key=_sort_key)

    # -----------------------------------------------------------------------
    # Submit controls
    # -----------------------------------------------------------------------

    def has_submit_controls(self, container_id: str) -> bool:
        return container_id in self._zones

    def get_submit_controls(self, container_id: str) -> SubmitZone | None:
        return self._zones.get(container_id)

    def ensure_submit_zone(self, container_id: str, zone_id: str) -> SubmitZone:
        zone = self._zones.get(container_id)
        if zone is None:
            self.ensure_container(container_id)
            zone = SubmitZone(container_id=container_id, zone_id=zone_id)
            self._zones[container_id] = zone
        elif zone.zone_id != zone_id:
            logger.debug("FormsStateStore: zone for %s renamed %s -> %s", container_id, zone.zone_id, zone_id)
            zone.zone_id = zone_id
        return zone

    def set_submit_controls(
        self,
        container_id: str,
        zone_id: str,
        controls: list[ControlData] | None = None,
        *,
        before: Any = None,
        after: Any = None,
    ) -> SubmitZone:
        """
        Upsert the zone. A given control list replaces the stored one and is
        re-sorted by order; equal orders keep their relative position.
        """
        zone = self.ensure_submit_zone(container_id, zone_id)
        if before is not None:
            zone.before = before
        if after is not None:
            zone.after = after
        if controls is not None:
            normalized = [
                Control(
                    id=c.id,
                    label=c.label,
                    component=c.component,
                    component_context=dict(c.component_context),
                    order=c.order,
                )
                for c in controls
            ]
            zone.controls = sorted(normalized, key=lambda c: c.order)
        return zone

    # -----------------------------------------------------------------------
    # Schema collaborators
    # -----------------------------------------------------------------------

    def lookup_component_alias(self, field_id: str, container_id: str | None = None) -> str | None:
        """Component alias of a field, group field or submit control, in that order."""
        candidates = sorted(self._fields.values(), key=lambda f: (f.group_id is not None, f.index))
        for f in candidates:
            if f.field_id == field_id and (container_id is None or f.container_id == container_id):
                return f.component
        for cid, zone in self._zones.items():
            if container_id is not None and cid != container_id:
                continue
            for control in zone.controls:
                if control.id == field_id:
                    return control.component
        return None

    def get_registered_field_metadata(self, container_id: str | None = None) -> list[dict[str, Any]]:
        """
        Flattened field records for schema derivation.

        Section-level fields come first, then group fields with a `group`
        entry describing their parent group and its sorted field ids.
        """
        container_ids = [container_id] if container_id is not None else self.containers()
        entries: list[dict[str, Any]] = []
        group_entries: list[dict[str, Any]] = []
        for cid in container_ids:
            for section in self.get_sections(cid):
                for f in self.get_fields(cid, section.section_id):
                    entries.append(
                        {
                            "container_id": cid,
                            "section_id": section.section_id,
                            "field": f.to_dict(),
                        }
                    )
                for group in self.get_groups(cid, section.section_id):
                    group_fields = self.get_group_fields(cid, section.section_id, group.group_id)
                    group_dict = group.to_dict()
                    group_dict["fields"] = [gf.field_id for gf in group_fields]
                    for gf in group_fields:
                        group_entries.append(
                            {
                                "container_id": cid,
                                "section_id": section.section_id,
                                "group_id": group.group_id,
                                "field": gf.to_dict(),
                                "group": group_dict,
                            }
                        )
        return entries + group_entries
