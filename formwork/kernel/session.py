"""
Formwork Kernel — Render Session

Per-pass coordinator between the override resolver, the component manifest
and the asset bucket:

  render_element(slot, config, context)
    → root callback (root-wrapper only), or
    → resolve template key → manifest.render → ingest assets → markup

The session also owns the memo tables used during one pass (schema bundles,
the component catalogue). They live and die with the session.
"""

from __future__ import annotations

import contextlib
import io
import logging
from collections.abc import Callable
from typing import Any

from formwork.kernel.assets import AssetEnqueuer, FormsAssets
from formwork.kernel.errors import InvalidArgumentError
from formwork.kernel.manifest import ComponentManifest
from formwork.kernel.overrides import TemplateOverrideResolver
from formwork.kernel.types import SLOT_ROOT_WRAPPER, RootCallback

logger = logging.getLogger(__name__)


def capture_output(callback: Callable[..., Any], *args: Any) -> str:
    """Run a markup callback; printed output and a returned string both count."""
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        returned = callback(*args)
    markup = buffer.getvalue()
    if isinstance(returned, str):
        markup += returned
    return markup


class FormsServiceSession:
    """One render/build pass: resolver + manifest + asset bucket + memo tables."""

    def __init__(
        self,
        manifest: ComponentManifest,
        assets: FormsAssets | None = None,
        form_defaults: dict[str, str] | None = None,
        resolver: TemplateOverrideResolver | None = None,
    ) -> None:
        self.manifest = manifest
        self.assets = assets if assets is not None else FormsAssets()
        self.resolver = resolver if resolver is not None else TemplateOverrideResolver(form_defaults)
        self._root_callbacks: dict[str, RootCallback] = {}
        self._used_components: dict[str, None] = {}
        self._flushed: set[tuple[str, str]] = set()
        self._media_enqueued = False
        self.schema_bundle_cache: dict[str, Any] = {}
        self._catalogue: dict[str, dict[str, Any]] | None = None

    # -----------------------------------------------------------------------
    # Template overrides
    # -----------------------------------------------------------------------

    def set_form_defaults(self, defaults: dict[str, str]) -> None:
        self.resolver.set_form_defaults(defaults)

    def override_form_defaults(self, overrides: dict[str, str]) -> None:
        self.resolver.override_form_defaults(overrides)

    def get_form_defaults(self) -> dict[str, str]:
        return self.resolver.get_form_defaults()

    def set_individual_element_override(self, element_type: str, element_id: str, overrides: dict[str, str]) -> None:
        self.resolver.set_element_overrides(element_type, element_id, overrides)

    def get_individual_element_overrides(self, element_type: str, element_id: str) -> dict[str, str]:
        return self.resolver.get_element_overrides(element_type, element_id)

    def clear_element_overrides(self, element_type: str, element_id: str, slot: str | None = None) -> None:
        self.resolver.clear_element_overrides(element_type, element_id, slot)

    def set_submit_controls_override(self, root_id: str, zone_id: str, template_key: str) -> None:
        self.resolver.set_submit_controls_override(root_id, zone_id, template_key)

    def resolve_template(self, slot: str, context: dict[str, Any] | None = None) -> str:
        return self.resolver.resolve_template(slot, context)

    # -----------------------------------------------------------------------
    # Root callbacks
    # -----------------------------------------------------------------------

    def set_root_template_callback(self, root_id: str, callback: RootCallback) -> None:
        if not callable(callback):
            raise InvalidArgumentError(f'Root template callback for "{root_id}" must be callable.')
        self._root_callbacks[root_id] = callback

    def get_root_template_callback(self, root_id: str) -> RootCallback | None:
        return self._root_callbacks.get(root_id)

    def clear_root_template_callback(self, root_id: str) -> None:
        self._root_callbacks.pop(root_id, None)

    def clear_root_template_override(self, root_id: str) -> None:
        """Remove both the root callback and the root override map."""
        self._root_callbacks.pop(root_id, None)
        self.resolver.clear_element_overrides("root", root_id)

    # -----------------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------------

    def render_element(
        self,
        slot: str,
        element_config: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> str:
        element_config = dict(element_config or {})
        context = dict(context or {})

        if slot == SLOT_ROOT_WRAPPER:
            root_id = context.get("root_id") or context.get("container_id")
            callback = self._root_callbacks.get(str(root_id)) if root_id else None
            if callback is not None:
                return capture_output(callback, {**element_config, **context})

        template_key = element_config.pop("root_override", None) or self.resolver.resolve_template(slot, context)
        return self._render(template_key, {**element_config, **context})

    def render_component(self, alias: str, context: dict[str, Any]) -> str:
        return self._render(alias, context)

    def render_field_component(
        self,
        alias: str,
        field_id: str,
        label: str,
        context: dict[str, Any],
        values: dict[str, Any] | None = None,
    ) -> str:
        """Render a field's component with its id, label and the current values injected."""
        payload = dict(context)
        payload["_field_id"] = field_id
        payload["_label"] = label
        payload["_values"] = dict(values or {})
        return self._render(alias, payload)

    def _render(self, alias: str, context: dict[str, Any]) -> str:
        result = self.manifest.render(alias, context)
        for warning in self.manifest.take_warnings():
            logger.warning("FormsServiceSession: %s: %s", alias, warning)
        self.assets.ingest(result)
        self.assets.ingest_declared(self.manifest.get_assets_for(alias))
        self.note_component_used(alias)
        return result.markup

    def note_component_used(self, alias: str) -> None:
        self._used_components[alias] = None

    def used_components(self) -> list[str]:
        return list(self._used_components)

    # -----------------------------------------------------------------------
    # Assets
    # -----------------------------------------------------------------------

    def enqueue_assets(self, enqueuer: AssetEnqueuer) -> int:
        """
        Register and enqueue every immediate asset not flushed yet; deferred
        assets are only registered. Safe to call repeatedly.
        Returns how many handles were newly flushed.
        """
        flushed = 0
        for style in self.assets.styles():
            if ("style", style.handle) in self._flushed:
                continue
            enqueuer.register_style(style)
            enqueuer.enqueue_style(style.handle)
            self._flushed.add(("style", style.handle))
            flushed += 1
        for script in self.assets.scripts():
            if ("script", script.handle) in self._flushed:
                continue
            enqueuer.register_script(script)
            enqueuer.enqueue_script(script.handle)
            for object_name, data in script.localize.items():
                enqueuer.localize_script(script.handle, object_name, data)
            self._flushed.add(("script", script.handle))
            flushed += 1
        for style in self.assets.deferred_styles():
            if ("style-registered", style.handle) not in self._flushed:
                enqueuer.register_style(style)
                self._flushed.add(("style-registered", style.handle))
        for script in self.assets.deferred_scripts():
            if ("script-registered", script.handle) not in self._flushed:
                enqueuer.register_script(script)
                self._flushed.add(("script-registered", script.handle))
        if self.assets.requires_media() and not self._media_enqueued:
            enqueuer.enqueue_media()
            self._media_enqueued = True
        return flushed

    def enqueue_deferred_assets(self, hook: str, enqueuer: AssetEnqueuer) -> int:
        """Enqueue the deferred assets waiting on `hook`, once each."""
        flushed = 0
        for style in self.assets.deferred_styles(hook):
            if ("style-deferred", style.handle) in self._flushed:
                continue
            if ("style-registered", style.handle) not in self._flushed:
                enqueuer.register_style(style)
                self._flushed.add(("style-registered", style.handle))
            enqueuer.enqueue_style(style.handle)
            self._flushed.add(("style-deferred", style.handle))
            flushed += 1
        for script in self.assets.deferred_scripts(hook):
            if ("script-deferred", script.handle) in self._flushed:
                continue
            if ("script-registered", script.handle) not in self._flushed:
                enqueuer.register_script(script)
                self._flushed.add(("script-registered", script.handle))
            enqueuer.enqueue_script(script.handle)
            for object_name, data in script.localize.items():
                enqueuer.localize_script(script.handle, object_name, data)
            self._flushed.add(("script-deferred", script.handle))
            flushed += 1
        if flushed:
            logger.debug("FormsServiceSession: flushed %d deferred assets for hook %s", flushed, hook)
        return flushed

    # -----------------------------------------------------------------------
    # Memo tables
    # -----------------------------------------------------------------------

    def catalogue(self) -> dict[str, dict[str, Any]]:
        if self._catalogue is None:
            self._catalogue = self.manifest.default_catalogue()
        return self._catalogue

    def clear_caches(self) -> None:
        self.schema_bundle_cache.clear()
        self._catalogue = None
