"""
Formwork Kernel — Update Handlers

One handler per recognized builder event, wired into an UpdateRouter by
create_update_router(). Handlers mutate the state store and the session's
override tables, and return warnings for anything they had to skip.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import Any

from formwork.kernel.events import parse_control
from formwork.kernel.router import Fallback, UpdateRouter
from formwork.kernel.session import FormsServiceSession
from formwork.kernel.store import FormsStateStore
from formwork.kernel.types import (
    SLOT_SUBMIT_CONTROLS_WRAPPER,
    ControlData,
    FieldEvent,
    FormDefaultsOverrideEvent,
    GroupEvent,
    GroupFieldEvent,
    GroupMetadataEvent,
    SectionCleanupEvent,
    SectionEvent,
    SectionMetadataEvent,
    SubmitControlsSetEvent,
    SubmitControlsZoneEvent,
    TemplateOverrideEvent,
    Warning,
)


@dataclass
class UpdateTarget:
    """What the handlers write to."""

    store: FormsStateStore
    session: FormsServiceSession
    on_section_cleanup: Callable[[str], Any] | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def create_update_router(
    store: FormsStateStore,
    session: FormsServiceSession,
    *,
    fallback: Fallback | None = None,
    on_section_cleanup: Callable[[str], Any] | None = None,
) -> UpdateRouter:
    """A router with every recognized builder event registered."""
    target = UpdateTarget(store=store, session=session, on_section_cleanup=on_section_cleanup)
    router = UpdateRouter(fallback=fallback)
    for name, handler in _HANDLERS.items():
        router.register(name, partial(handler, target))
    return router


# ---------------------------------------------------------------------------
# Structure handlers
# ---------------------------------------------------------------------------


def _handle_section(target: UpdateTarget, event: SectionEvent) -> None:
    target.store.set_section(event.container_id, event.section_id, event.data)


def _handle_section_metadata(target: UpdateTarget, event: SectionMetadataEvent) -> None:
    target.store.set_section(event.container_id, event.section_id, event.data)


def _handle_field(target: UpdateTarget, event: FieldEvent) -> None:
    target.store.upsert_field(event.container_id, event.section_id, None, event.field)


def _handle_group(target: UpdateTarget, event: GroupEvent) -> None:
    target.store.set_group(event.container_id, event.section_id, event.group_id, event.data)


def _handle_group_field(target: UpdateTarget, event: GroupFieldEvent) -> None:
    target.store.upsert_field(event.container_id, event.section_id, event.group_id, event.field)


def _handle_group_metadata(target: UpdateTarget, event: GroupMetadataEvent) -> None:
    target.store.set_group(event.container_id, event.section_id, event.group_id, event.data)


def _handle_section_cleanup(target: UpdateTarget, event: SectionCleanupEvent) -> list[Warning] | None:
    if not target.store.has_section_id(event.section_id):
        return [
            Warning(
                code="UNKNOWN_SECTION",
                message=f'section_cleanup: no section "{event.section_id}" is registered',
                details={"section_id": event.section_id},
            )
        ]
    if target.on_section_cleanup is not None:
        target.on_section_cleanup(event.section_id)
    return None


# ---------------------------------------------------------------------------
# Template handlers
# ---------------------------------------------------------------------------


def _handle_template_override(target: UpdateTarget, event: TemplateOverrideEvent) -> list[Warning] | None:
    session = target.session
    warnings: list[Warning] = []

    if event.element_type == "root":
        if not event.overrides and not event.has_callback:
            session.clear_root_template_override(event.element_id)
            return None
        if event.has_callback:
            if event.callback is None:
                session.clear_root_template_callback(event.element_id)
            else:
                session.set_root_template_callback(event.element_id, event.callback)
        elif set(event.overrides) - ({SLOT_SUBMIT_CONTROLS_WRAPPER} if event.zone_id else set()):
            # a root template replaces the callback; zone overrides do not
            session.clear_root_template_callback(event.element_id)
    elif event.has_callback:
        warnings.append(
            Warning(
                code="CALLBACK_NOT_SUPPORTED",
                message=f"template_override: callbacks apply to root elements only, ignoring it for "
                f'{event.element_type} "{event.element_id}"',
            )
        )

    overrides = dict(event.overrides)
    if event.zone_id and SLOT_SUBMIT_CONTROLS_WRAPPER in overrides:
        session.set_submit_controls_override(
            event.element_id, event.zone_id, overrides.pop(SLOT_SUBMIT_CONTROLS_WRAPPER)
        )

    if overrides:
        session.set_individual_element_override(event.element_type, event.element_id, overrides)
    elif not event.overrides and not event.has_callback:
        warnings.append(
            Warning(
                code="EMPTY_OVERRIDE",
                message=f'template_override: nothing to apply for {event.element_type} "{event.element_id}"',
            )
        )
    return warnings


def _handle_form_defaults_override(target: UpdateTarget, event: FormDefaultsOverrideEvent) -> list[Warning] | None:
    if not event.overrides:
        return [Warning(code="EMPTY_OVERRIDE", message="form_defaults_override: no overrides supplied")]
    target.session.override_form_defaults(event.overrides)
    return None


# ---------------------------------------------------------------------------
# Submit controls
# ---------------------------------------------------------------------------


def _handle_submit_controls_zone(target: UpdateTarget, event: SubmitControlsZoneEvent) -> None:
    target.store.set_submit_controls(event.container_id, event.zone_id, before=event.before, after=event.after)


def _handle_submit_controls_set(target: UpdateTarget, event: SubmitControlsSetEvent) -> list[Warning]:
    warnings: list[Warning] = []
    controls: list[ControlData] = []
    for position, raw in enumerate(event.controls):
        control = parse_control(raw, position, warnings)
        if control is not None:
            controls.append(control)
    target.store.set_submit_controls(event.container_id, event.zone_id, controls)
    return warnings


_HANDLERS: dict[str, Any] = {
    "section": _handle_section,
    "section_metadata": _handle_section_metadata,
    "field": _handle_field,
    "group": _handle_group,
    "group_field": _handle_group_field,
    "group_metadata": _handle_group_metadata,
    "template_override": _handle_template_override,
    "form_defaults_override": _handle_form_defaults_override,
    "submit_controls_zone": _handle_submit_controls_zone,
    "submit_controls_set": _handle_submit_controls_set,
    "section_cleanup": _handle_section_cleanup,
}
