"""
Formwork Kernel — the engine.

Five parts, leaf to root:
  manifest  — component alias → render / builder / validator / sanitizer factories
  store     — ordered tree of sections, groups, fields and submit zones
  router    — builder event name → handler, with a fallback for the rest
  overrides — two-tier template key resolution
  session   — one render pass: resolve → render → collect assets

Form ties them together for one container.
"""

from formwork.kernel.assets import AssetEnqueuer, FormsAssets
from formwork.kernel.cache import CacheBackend, ComponentCacheService, MemoryCache
from formwork.kernel.errors import (
    BuilderFactoryMissingError,
    ComponentNotFoundError,
    FormworkError,
    InvalidArgumentError,
    InvalidComponentResultError,
    UnknownUpdateError,
)
from formwork.kernel.events import parse_event
from formwork.kernel.form import Form
from formwork.kernel.loader import ComponentLoader
from formwork.kernel.manifest import ComponentManifest
from formwork.kernel.overrides import TemplateOverrideResolver
from formwork.kernel.render import FormsRenderService
from formwork.kernel.results import ComponentRenderResult, ScriptDefinition, StyleDefinition
from formwork.kernel.router import UpdateRouter, log_unknown_update, raise_unknown_update
from formwork.kernel.schema import FormsSchemaService
from formwork.kernel.session import FormsServiceSession
from formwork.kernel.store import FormsStateStore
from formwork.kernel.updates import create_update_router

__all__ = [
    "Form",
    "FormsStateStore",
    "UpdateRouter",
    "create_update_router",
    "log_unknown_update",
    "raise_unknown_update",
    "parse_event",
    "TemplateOverrideResolver",
    "ComponentManifest",
    "ComponentLoader",
    "ComponentCacheService",
    "CacheBackend",
    "MemoryCache",
    "ComponentRenderResult",
    "StyleDefinition",
    "ScriptDefinition",
    "FormsAssets",
    "AssetEnqueuer",
    "FormsServiceSession",
    "FormsRenderService",
    "FormsSchemaService",
    "FormworkError",
    "InvalidArgumentError",
    "UnknownUpdateError",
    "ComponentNotFoundError",
    "BuilderFactoryMissingError",
    "InvalidComponentResultError",
]
