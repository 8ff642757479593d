"""
Formwork Kernel — Form

Composition root for one container (a page or a collection). Owns the
state store, the render session and the update router, and hands builders
the update function they emit through.

build() is the outermost composition boundary: an exception raised by the
user's builder callback is logged and turns the form into an error notice
instead of propagating into the host application.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from formwork.builders.section import SectionBuilder
from formwork.builders.submit import SubmitControlsBuilder
from formwork.config import settings
from formwork.kernel.assets import AssetEnqueuer
from formwork.kernel.errors import InvalidArgumentError
from formwork.kernel.manifest import ComponentManifest
from formwork.kernel.notices import render_fallback_page
from formwork.kernel.render import FormsRenderService
from formwork.kernel.router import Fallback, log_unknown_update, raise_unknown_update
from formwork.kernel.schema import FormsSchemaService, ValidationOutcome
from formwork.kernel.session import FormsServiceSession
from formwork.kernel.store import FormsStateStore
from formwork.kernel.types import DEFAULT_SUBMIT_ZONE, SLOT_ROOT_WRAPPER, DispatchResult, RootCallback
from formwork.kernel.updates import create_update_router

logger = logging.getLogger(__name__)

FORM_KINDS: set[str] = {"page", "collection"}


class Form:
    """One form container and everything needed to build and render it."""

    def __init__(
        self,
        form_id: str,
        *,
        kind: str = "page",
        title: str = "",
        manifest: ComponentManifest | None = None,
        form_defaults: dict[str, str] | None = None,
        fallback: Fallback | None = None,
        strict: bool | None = None,
        is_dev: bool | None = None,
    ) -> None:
        if not form_id or not form_id.strip():
            raise InvalidArgumentError("Form id cannot be empty.")
        if kind not in FORM_KINDS:
            raise InvalidArgumentError(f'Unknown form kind "{kind}"; expected one of {sorted(FORM_KINDS)}.')

        self.form_id = form_id
        self.kind = kind
        self.title = title
        self.manifest = manifest if manifest is not None else ComponentManifest()
        self.store = FormsStateStore()
        self.store.ensure_container(form_id)
        self.session = FormsServiceSession(self.manifest, form_defaults=form_defaults)

        if fallback is None:
            strict_updates = settings.STRICT_UPDATES if strict is None else strict
            fallback = raise_unknown_update if strict_updates else log_unknown_update
        self.router = create_update_router(
            self.store,
            self.session,
            fallback=fallback,
            on_section_cleanup=self._release_section,
        )
        self.renderer = FormsRenderService(self.store, self.session)
        self._schema = FormsSchemaService(self.store, self.session)
        self._active_sections: dict[str, SectionBuilder] = {}
        self._build_error: Exception | None = None
        self._is_dev = is_dev

    # -----------------------------------------------------------------------
    # Updates
    # -----------------------------------------------------------------------

    def update(self, name: str, data: Any) -> DispatchResult:
        """The update function every builder emits through."""
        return self.router.dispatch(name, data)

    # -----------------------------------------------------------------------
    # Builder entry points
    # -----------------------------------------------------------------------

    def section(self, section_id: str, heading: str = "", description: Any = None) -> SectionBuilder:
        builder = SectionBuilder(self, section_id, heading, description)
        self._active_sections[section_id] = builder
        return builder

    def active_sections(self) -> list[str]:
        return list(self._active_sections)

    def _release_section(self, section_id: str) -> None:
        self._active_sections.pop(section_id, None)

    def submit_controls(self, zone_id: str = DEFAULT_SUBMIT_ZONE, template: str | None = None) -> SubmitControlsBuilder:
        return SubmitControlsBuilder(self, zone_id, template)

    def template(self, template_key: str) -> Form:
        """Override the root-wrapper template for this form."""
        self.update(
            "template_override",
            {"element_type": "root", "element_id": self.form_id, "overrides": {SLOT_ROOT_WRAPPER: template_key}},
        )
        return self

    def root_callback(self, callback: RootCallback | None) -> Form:
        """Render the whole root with a callback instead of a template; None removes it."""
        self.update("template_override", {"element_type": "root", "element_id": self.form_id, "callback": callback})
        return self

    def clear_root_template(self) -> Form:
        self.update("template_override", {"element_type": "root", "element_id": self.form_id, "overrides": {}})
        return self

    def default_template(self, slot: str, template_key: str) -> Form:
        return self.default_templates({slot: template_key})

    def default_templates(self, overrides: dict[str, str]) -> Form:
        self.update("form_defaults_override", {"overrides": overrides})
        return self

    # -----------------------------------------------------------------------
    # Composition boundary
    # -----------------------------------------------------------------------

    def build(self, callback: Callable[[Form], Any]) -> bool:
        """Run a builder callback. Returns False if it raised."""
        try:
            callback(self)
        except Exception as exc:
            logger.exception(
                "Form: builder callback failed for %s form %r (active sections: %s)",
                self.kind,
                self.form_id,
                self.active_sections(),
            )
            self._build_error = exc
            return False
        return True

    @property
    def build_error(self) -> Exception | None:
        return self._build_error

    # -----------------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------------

    def render(
        self,
        values: dict[str, Any] | None = None,
        enqueuer: AssetEnqueuer | None = None,
        outcome: ValidationOutcome | None = None,
    ) -> str:
        """
        Render the form. Pass the outcome of validate() to show each field's
        messages and notices; its sanitized values are used when values is None.
        """
        if self._build_error is not None:
            return render_fallback_page(self._build_error, self.form_id, is_dev=self._is_dev)
        markup = self.renderer.render_form(self.form_id, values, title=self.title, outcome=outcome)
        if enqueuer is not None:
            self.session.enqueue_assets(enqueuer)
        return markup

    def enqueue_assets(self, enqueuer: AssetEnqueuer) -> int:
        return self.session.enqueue_assets(enqueuer)

    # -----------------------------------------------------------------------
    # Schema
    # -----------------------------------------------------------------------

    def schema(self) -> FormsSchemaService:
        return self._schema

    def validate(self, values: dict[str, Any]) -> ValidationOutcome:
        return self._schema.validate(values, self.form_id)
