"""
Formwork Kernel — Component Manifest

Registry from component alias to a render factory and to optional builder,
validator and sanitizer factories.

Two sources feed it:
- manual registrations (register, register_builder, ...), held in their own
  tables and never touched by cache clears
- discovery through the ComponentLoader, whose per-alias role metadata may be
  served from the ComponentCacheService

Every read goes through discover_alias(), so a cold cache, a warm cache and
no cache at all produce the same answers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from formwork.kernel.cache import ComponentCacheService
from formwork.kernel.errors import (
    ComponentNotFoundError,
    InvalidArgumentError,
    InvalidComponentResultError,
)
from formwork.kernel.loader import ComponentLoader, import_string
from formwork.kernel.results import ComponentRenderResult, ScriptDefinition, StyleDefinition
from formwork.kernel.types import COMPONENT_ALIAS_PATTERN

logger = logging.getLogger(__name__)

RenderFactory = Callable[[dict[str, Any]], Any]
BuilderFactory = Callable[[str, str], Any]
RoleFactory = Callable[[], Any]


class ComponentManifest:
    """Alias → render/builder/validator/sanitizer registry."""

    def __init__(
        self,
        loader: ComponentLoader | None = None,
        cache: ComponentCacheService | None = None,
    ) -> None:
        self._loader = loader if loader is not None else ComponentLoader.default()
        self._cache = cache if cache is not None else ComponentCacheService()
        self._components: dict[str, RenderFactory] = {}
        self._registered_roles: dict[str, dict[str, Any]] = {}
        self._metadata: dict[str, dict[str, Any]] = {}
        self._builder_factories: dict[str, BuilderFactory] | None = None
        self._validator_factories: dict[str, RoleFactory] | None = None
        self._sanitizer_factories: dict[str, RoleFactory] | None = None
        self._instances: dict[tuple[str, str], Any] = {}
        self._warnings: list[str] = []

    @property
    def loader(self) -> ComponentLoader:
        return self._loader

    # -----------------------------------------------------------------------
    # Registration
    # -----------------------------------------------------------------------

    def register(self, alias: str, factory: RenderFactory) -> None:
        """Register a render factory: context → ComponentRenderResult."""
        self._check_alias(alias)
        if not callable(factory):
            raise InvalidArgumentError(f'Render factory for "{alias}" must be callable.')
        self._components[alias] = factory

    def register_builder(self, alias: str, builder: type | BuilderFactory) -> None:
        self._register_role(alias, "builder", builder)
        self._builder_factories = None

    def register_validator(self, alias: str, validator: type | RoleFactory) -> None:
        self._register_role(alias, "validator", validator)
        self._validator_factories = None

    def register_sanitizer(self, alias: str, sanitizer: type | RoleFactory) -> None:
        self._register_role(alias, "sanitizer", sanitizer)
        self._sanitizer_factories = None

    def _register_role(self, alias: str, role: str, value: Any) -> None:
        self._check_alias(alias)
        if not callable(value):
            raise InvalidArgumentError(f'{role.title()} for "{alias}" must be a class or callable.')
        self._registered_roles.setdefault(alias, {})[role] = value
        self._instances.pop((role, alias), None)

    def has(self, alias: str) -> bool:
        return alias in self._components or self._loader.has(alias)

    def aliases(self) -> list[str]:
        return sorted(set(self._components) | set(self._loader.aliases()))

    # -----------------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------------

    def render(self, alias: str, context: dict[str, Any]) -> ComponentRenderResult:
        self._check_alias(alias)
        factory = self._components.get(alias)
        if factory is None:
            if not self._loader.has(alias):
                raise ComponentNotFoundError(f'Unknown form component "{alias}".')
            factory = self._discovered_render_factory(alias)

        output = factory(dict(context))
        if isinstance(output, dict) and "result" in output:
            self._warnings.extend(str(w) for w in output.get("warnings") or [])
            output = output["result"]
        if not isinstance(output, ComponentRenderResult):
            raise InvalidComponentResultError(
                f'Component "{alias}" returned {type(output).__name__}, expected ComponentRenderResult.'
            )
        return output

    def render_to_string(self, alias: str, context: dict[str, Any]) -> str:
        return self.render(alias, context).markup

    def take_warnings(self) -> list[str]:
        warnings, self._warnings = self._warnings, []
        return warnings

    def _discovered_render_factory(self, alias: str) -> RenderFactory:
        normalizer_path = self.discover_alias(alias).get("normalizer")
        if normalizer_path:
            normalizer = import_string(normalizer_path)(self._loader)
            return lambda ctx: normalizer.render(alias, ctx)
        return lambda ctx: self._loader.render(alias, ctx)

    # -----------------------------------------------------------------------
    # Factories
    # -----------------------------------------------------------------------

    def builder_factories(self) -> dict[str, BuilderFactory]:
        """alias → factory(field_id, label) returning a fresh component builder."""
        if self._builder_factories is None:
            factories: dict[str, BuilderFactory] = {}
            for alias, path in self._discovered_role_paths("builder").items():
                factories[alias] = self._builder_from_class(alias, import_string(path))
            for alias, roles in self._registered_roles.items():
                builder = roles.get("builder")
                if builder is not None:
                    factories[alias] = (
                        self._builder_from_class(alias, builder) if isinstance(builder, type) else builder
                    )
            self._builder_factories = factories
        return dict(self._builder_factories)

    def validator_factories(self) -> dict[str, RoleFactory]:
        """alias → zero-argument factory returning the alias's shared validator."""
        if self._validator_factories is None:
            self._validator_factories = self._role_factories("validator")
        return dict(self._validator_factories)

    def sanitizer_factories(self) -> dict[str, RoleFactory]:
        if self._sanitizer_factories is None:
            self._sanitizer_factories = self._role_factories("sanitizer")
        return dict(self._sanitizer_factories)

    def is_component_schema_eligible(self, alias: str) -> bool:
        return self.has(alias) and alias in self.validator_factories()

    def get_assets_for(self, alias: str) -> dict[str, Any]:
        """Declared styles/scripts for an alias, empty when it has no Assets role."""
        assets: dict[str, Any] = {"styles": [], "scripts": [], "requires_media": False}
        if not self._loader.has(alias):
            return assets
        path = self.discover_alias(alias).get("assets")
        if not path:
            return assets
        declared = import_string(path)()
        assets["styles"] = [StyleDefinition.model_validate(s) for s in declared.styles()]
        assets["scripts"] = [ScriptDefinition.model_validate(s) for s in declared.scripts()]
        assets["requires_media"] = bool(declared.requires_media)
        return assets

    def get_defaults_for(self, alias: str) -> dict[str, Any]:
        if not self._loader.has(alias):
            return {}
        return dict(self.discover_alias(alias).get("defaults") or {})

    def default_catalogue(self) -> dict[str, dict[str, Any]]:
        """Every known alias with the roles it provides."""
        builders = self.builder_factories()
        validators = self.validator_factories()
        sanitizers = self.sanitizer_factories()
        catalogue: dict[str, dict[str, Any]] = {}
        for alias in self.aliases():
            catalogue[alias] = {
                "builder": alias in builders,
                "validator": alias in validators,
                "sanitizer": alias in sanitizers,
                "defaults": self.get_defaults_for(alias),
            }
        return catalogue

    def _discovered_role_paths(self, role: str) -> dict[str, str]:
        paths: dict[str, str] = {}
        for alias in self._loader.aliases():
            path = self.discover_alias(alias).get(role)
            if path:
                paths[alias] = path
        return paths

    def _role_factories(self, role: str) -> dict[str, RoleFactory]:
        factories: dict[str, RoleFactory] = {}
        for alias, path in self._discovered_role_paths(role).items():
            factories[alias] = self._shared_instance_factory(role, alias, import_string(path))
        for alias, roles in self._registered_roles.items():
            if role in roles:
                factories[alias] = self._shared_instance_factory(role, alias, roles[role])
        return factories

    def _shared_instance_factory(self, role: str, alias: str, create: Callable[[], Any]) -> RoleFactory:
        def factory() -> Any:
            key = (role, alias)
            instance = self._instances.get(key)
            if instance is None:
                instance = create()
                self._instances[key] = instance
            return instance

        return factory

    @staticmethod
    def _builder_from_class(alias: str, cls: type) -> BuilderFactory:
        return lambda field_id, label: cls(field_id, label, alias)

    # -----------------------------------------------------------------------
    # Discovery cache
    # -----------------------------------------------------------------------

    def discover_alias(self, alias: str) -> dict[str, Any]:
        """Role metadata for an alias: memo, then cache, then the loader."""
        meta = self._metadata.get(alias)
        if meta is not None:
            return meta
        cached = self._cache.get(alias)
        if isinstance(cached, dict):
            meta = cached
        else:
            meta = self._loader.discover(alias)
            self._cache.set(alias, meta)
        self._metadata[alias] = meta
        return meta

    def warm_cache(self) -> int:
        """Discover every alias up front. Returns how many were discovered."""
        aliases = self._loader.aliases()
        for alias in aliases:
            self.discover_alias(alias)
        return len(aliases)

    def clear_cache(self, alias: str = "") -> None:
        """Drop discovered metadata, for one alias or all of them."""
        if alias:
            self._cache.delete(alias)
            self._metadata.pop(alias, None)
            for role in ("validator", "sanitizer"):
                self._instances.pop((role, alias), None)
        else:
            self._cache.clear_all()
            self._metadata.clear()
            self._instances.clear()
        self._builder_factories = None
        self._validator_factories = None
        self._sanitizer_factories = None
        logger.info("ComponentManifest: cleared discovery cache for %s", alias or "all components")

    def clear_caches(self, metadata_only: bool = False) -> None:
        """clear_cache() plus, unless metadata_only, the loader's template cache and pending warnings."""
        self.clear_cache()
        if not metadata_only:
            self._loader.clear()
            self._warnings.clear()

    def get_cache_stats(self) -> dict[str, Any]:
        return {
            "discovered": len(self._metadata),
            "registered": len(self._components),
            "cache": self._cache.get_stats(),
        }

    @staticmethod
    def _check_alias(alias: str) -> None:
        if not isinstance(alias, str) or not COMPONENT_ALIAS_PATTERN.match(alias):
            raise InvalidArgumentError(f'Invalid component key "{alias}".')
