"""
Formwork Kernel — Asset Bucket

Request-scoped collection of the styles and scripts rendered components
asked for. Entries are keyed by handle and the last write wins. Entries
with a hook wait for that lifecycle point; the rest are flushed immediately.

The bucket never talks to the host platform. An AssetEnqueuer does.
"""

from __future__ import annotations

from typing import Any, Protocol

from formwork.kernel.results import ComponentRenderResult, ScriptDefinition, StyleDefinition


class AssetEnqueuer(Protocol):
    """The host-side collaborator that actually registers and enqueues assets."""

    def register_style(self, style: StyleDefinition) -> None: ...

    def enqueue_style(self, handle: str) -> None: ...

    def register_script(self, script: ScriptDefinition) -> None: ...

    def enqueue_script(self, handle: str) -> None: ...

    def localize_script(self, handle: str, object_name: str, data: dict[str, Any]) -> None: ...

    def enqueue_media(self) -> None: ...


class FormsAssets:
    """Deduplicated style/script requirements, split into immediate and deferred."""

    def __init__(self) -> None:
        self._styles: dict[str, StyleDefinition] = {}
        self._deferred_styles: dict[str, StyleDefinition] = {}
        self._scripts: dict[str, ScriptDefinition] = {}
        self._deferred_scripts: dict[str, ScriptDefinition] = {}
        self._requires_media = False

    def ingest(self, result: ComponentRenderResult) -> None:
        for style in result.styles:
            self.add_style(style)
        for script in result.scripts:
            self.add_script(script)
        if result.requires_media:
            self._requires_media = True

    def ingest_declared(self, declared: dict[str, Any]) -> None:
        """Merge a manifest get_assets_for() payload."""
        for style in declared.get("styles", []):
            self.add_style(style)
        for script in declared.get("scripts", []):
            self.add_script(script)
        if declared.get("requires_media"):
            self._requires_media = True

    def add_style(self, style: StyleDefinition) -> None:
        self._styles.pop(style.handle, None)
        self._deferred_styles.pop(style.handle, None)
        target = self._deferred_styles if style.hook else self._styles
        target[style.handle] = style

    def add_script(self, script: ScriptDefinition) -> None:
        self._scripts.pop(script.handle, None)
        self._deferred_scripts.pop(script.handle, None)
        target = self._deferred_scripts if script.hook else self._scripts
        target[script.handle] = script

    def styles(self) -> list[StyleDefinition]:
        return list(self._styles.values())

    def scripts(self) -> list[ScriptDefinition]:
        return list(self._scripts.values())

    def deferred_styles(self, hook: str | None = None) -> list[StyleDefinition]:
        return [s for s in self._deferred_styles.values() if hook is None or s.hook == hook]

    def deferred_scripts(self, hook: str | None = None) -> list[ScriptDefinition]:
        return [s for s in self._deferred_scripts.values() if hook is None or s.hook == hook]

    def requires_media(self) -> bool:
        return self._requires_media

    def handles(self) -> dict[str, list[str]]:
        return {
            "styles": sorted(self._styles),
            "deferred_styles": sorted(self._deferred_styles),
            "scripts": sorted(self._scripts),
            "deferred_scripts": sorted(self._deferred_scripts),
        }

    def is_empty(self) -> bool:
        return not (
            self._styles or self._deferred_styles or self._scripts or self._deferred_scripts or self._requires_media
        )
