"""
Formwork Kernel — Component Loader

Finds component templates on disk and the role classes that go with them.

Aliases come from the template path relative to the base directory:
segments are lower-kebab-cased and joined by dots, and a trailing `view`
segment is dropped.

    elements/button/view.mustache         → elements.button
    layout/zone/section-wrapper.mustache  → layout.zone.section-wrapper

Role classes live in the module that mirrors the alias inside the loader's
package (`<package>.elements.button`). They are reported as "module:Class"
strings so discovery results can sit in any key/value cache.
"""

from __future__ import annotations

import importlib
import logging
import re
from pathlib import Path
from typing import Any

import chevron

from formwork.config import settings
from formwork.kernel.cache import ComponentCacheService
from formwork.kernel.errors import ComponentNotFoundError, InvalidArgumentError
from formwork.kernel.results import ComponentRenderResult
from formwork.kernel.types import COMPONENT_ALIAS_PATTERN

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".mustache"

# short names for the layout wrappers, kept for existing override maps
LEGACY_ALIASES: dict[str, str] = {
    "root-wrapper": "layout.container.root-wrapper",
    "section-wrapper": "layout.zone.section-wrapper",
    "group-wrapper": "layout.zone.group-wrapper",
    "field-wrapper": "layout.field.field-wrapper",
    "fieldset-wrapper": "layout.field.fieldset-wrapper",
}

ROLE_CLASS_NAMES: dict[str, str] = {
    "normalizer": "Normalizer",
    "builder": "Builder",
    "validator": "Validator",
    "sanitizer": "Sanitizer",
    "assets": "Assets",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

DEFAULT_BASE_DIR = Path(__file__).resolve().parent.parent / "components"
DEFAULT_PACKAGE = "formwork.components"


def alias_from_path(relative: Path) -> str:
    """`Fields/TextInput/view.mustache` → `fields.text-input`."""
    parts = list(relative.parts)
    parts[-1] = parts[-1][: -len(TEMPLATE_SUFFIX)] if parts[-1].endswith(TEMPLATE_SUFFIX) else parts[-1]
    if len(parts) > 1 and parts[-1].lower() == "view":
        parts.pop()
    return ".".join(_kebab(p) for p in parts)


def _kebab(segment: str) -> str:
    return _CAMEL_BOUNDARY.sub("-", segment).replace("_", "-").lower()


def import_string(path: str) -> Any:
    """Resolve a "module:Attribute" string."""
    module_name, _, attr = path.partition(":")
    module = importlib.import_module(module_name)
    return getattr(module, attr)


class ComponentLoader:
    """Template discovery, template rendering and role-class lookup."""

    def __init__(
        self,
        base_dir: Path | str,
        package: str | None = None,
        map: dict[str, Path | str] | None = None,
        cache: ComponentCacheService | None = None,
    ) -> None:
        self._base_dir = Path(base_dir)
        self._package = package
        self._cache = cache or ComponentCacheService(prefix=settings.TEMPLATE_CACHE_PREFIX)
        self._templates: dict[str, Path] | None = None
        self._manual: dict[str, Path] = {}
        self._modules: dict[str, str] = {}
        for alias, path in (map or {}).items():
            self.register(alias, path)

    @classmethod
    def default(cls, cache: ComponentCacheService | None = None) -> ComponentLoader:
        """Loader over the components shipped with formwork."""
        return cls(DEFAULT_BASE_DIR, DEFAULT_PACKAGE, cache=cache)

    # -----------------------------------------------------------------------
    # Aliases
    # -----------------------------------------------------------------------

    def register(self, alias: str, template_path: Path | str, module: str | None = None) -> None:
        """Add an alias that lives outside the base directory."""
        self._check_alias(alias)
        self._manual[alias] = Path(template_path)
        if module:
            self._modules[alias] = module

    def aliases(self) -> list[str]:
        known = set(self._discover()) | set(self._manual)
        known |= {legacy for legacy, target in LEGACY_ALIASES.items() if target in known}
        return sorted(known)

    def has(self, alias: str) -> bool:
        return self._template_path(alias) is not None

    def canonical(self, alias: str) -> str:
        return LEGACY_ALIASES.get(alias, alias) if alias not in self._manual else alias

    def _discover(self) -> dict[str, Path]:
        if self._templates is None:
            templates: dict[str, Path] = {}
            if self._base_dir.is_dir():
                for path in sorted(self._base_dir.rglob(f"*{TEMPLATE_SUFFIX}")):
                    alias = alias_from_path(path.relative_to(self._base_dir))
                    if not COMPONENT_ALIAS_PATTERN.match(alias):
                        logger.warning("ComponentLoader: skipping %s, alias %r is not valid", path, alias)
                        continue
                    templates[alias] = path
            self._templates = templates
            if settings.VERBOSE_DEBUG:
                logger.debug("ComponentLoader: discovered %d templates under %s", len(templates), self._base_dir)
        return self._templates

    def _template_path(self, alias: str) -> Path | None:
        if alias in self._manual:
            return self._manual[alias]
        return self._discover().get(self.canonical(alias))

    # -----------------------------------------------------------------------
    # Templates
    # -----------------------------------------------------------------------

    def get_template_source(self, alias: str) -> str:
        path = self._template_path(alias)
        if path is None:
            raise ComponentNotFoundError(f'Unknown form component "{alias}".')
        cache_key = self.canonical(alias)
        source = self._cache.get(cache_key)
        if source is None:
            source = path.read_text(encoding="utf-8")
            self._cache.set(cache_key, source)
        return source

    def render_template(self, alias: str, context: dict[str, Any]) -> str:
        return chevron.render(self.get_template_source(alias), context)

    def render(self, alias: str, context: dict[str, Any]) -> ComponentRenderResult:
        """Plain template render, for components without a Normalizer."""
        component_type = "layout_wrapper" if self.canonical(alias).startswith("layout.") else "form_field"
        return ComponentRenderResult(markup=self.render_template(alias, context), component_type=component_type)

    def clear(self) -> None:
        self._templates = None
        self._cache.clear_all()

    # -----------------------------------------------------------------------
    # Role classes
    # -----------------------------------------------------------------------

    def module_for(self, alias: str) -> str | None:
        if alias in self._modules:
            return self._modules[alias]
        if alias in self._manual or self._package is None:
            return None
        segments = [s.replace("-", "_") for s in self.canonical(alias).split(".")]
        return ".".join([self._package, *segments])

    def discover(self, alias: str) -> dict[str, Any]:
        """
        Role metadata for one alias:
        {normalizer, builder, validator, sanitizer, assets, defaults}.
        Roles are "module:Class" strings or None.
        """
        from formwork.components.base import ROLE_BASES

        metadata: dict[str, Any] = {role: None for role in ROLE_CLASS_NAMES}
        metadata["defaults"] = {}

        module_name = self.module_for(alias)
        module = self._import_component_module(module_name) if module_name else None
        if module is None:
            return metadata

        for role, class_name in ROLE_CLASS_NAMES.items():
            candidate = getattr(module, class_name, None)
            if isinstance(candidate, type) and issubclass(candidate, ROLE_BASES[role]):
                metadata[role] = f"{module_name}:{class_name}"
        defaults = getattr(module, "DEFAULTS", None)
        if isinstance(defaults, dict):
            metadata["defaults"] = dict(defaults)

        if settings.VERBOSE_DEBUG:
            found = [role for role in ROLE_CLASS_NAMES if metadata[role]]
            logger.debug("ComponentLoader: %s roles %s", alias, found)
        return metadata

    @staticmethod
    def _import_component_module(module_name: str) -> Any:
        try:
            return importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # a template without a module is normal; a missing import inside one is not
            if exc.name and module_name.startswith(exc.name):
                return None
            raise

    @staticmethod
    def _check_alias(alias: str) -> None:
        if not alias or not COMPONENT_ALIAS_PATTERN.match(alias):
            raise InvalidArgumentError(f'Invalid component alias "{alias}".')
