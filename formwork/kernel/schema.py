"""
Formwork Kernel — Schema Service

Derives per-field validation from what the builders registered: every field
whose component has a validator factory gets that validator, and a sanitizer
when one exists. The bundle is memoized in the session per container.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from formwork.kernel.session import FormsServiceSession
from formwork.kernel.store import FormsStateStore
from formwork.kernel.types import PSEUDO_COMPONENTS

logger = logging.getLogger(__name__)


@dataclass
class FieldSchema:
    field_id: str
    component: str
    container_id: str
    section_id: str
    group_id: str | None = None
    required: bool = False
    context: dict[str, Any] = field(default_factory=dict)
    validators: list[Any] = field(default_factory=list)
    sanitizers: list[Any] = field(default_factory=list)


@dataclass
class ValidationOutcome:
    """Sanitized values plus messages per field id. Valid when messages is empty."""

    values: dict[str, Any] = field(default_factory=dict)
    messages: dict[str, list[str]] = field(default_factory=dict)
    notices: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.messages


class FormsSchemaService:
    def __init__(self, store: FormsStateStore, session: FormsServiceSession) -> None:
        self.store = store
        self.session = session

    def resolve_schema_bundle(self, container_id: str | None = None) -> dict[str, FieldSchema]:
        cache_key = container_id or "*"
        bundle = self.session.schema_bundle_cache.get(cache_key)
        if bundle is None:
            bundle = self._build_bundle(container_id)
            self.session.schema_bundle_cache[cache_key] = bundle
        return bundle

    def _build_bundle(self, container_id: str | None) -> dict[str, FieldSchema]:
        manifest = self.session.manifest
        validators = manifest.validator_factories()
        sanitizers = manifest.sanitizer_factories()

        bundle: dict[str, FieldSchema] = {}
        for entry in self.store.get_registered_field_metadata(container_id):
            record = entry["field"]
            alias = record["component"]
            if alias in PSEUDO_COMPONENTS:
                continue
            context = record["component_context"]
            schema = FieldSchema(
                field_id=record["id"],
                component=alias,
                container_id=entry["container_id"],
                section_id=entry["section_id"],
                group_id=entry.get("group_id"),
                required=bool(context.get("required")),
                context=dict(context),
            )
            if manifest.is_component_schema_eligible(alias):
                schema.validators.append(validators[alias]())
            if alias in sanitizers:
                schema.sanitizers.append(sanitizers[alias]())
            previous = bundle.get(schema.field_id)
            if previous is not None:
                logger.warning(
                    "FormsSchemaService: field id %r is registered in both %s and %s; keeping the latter",
                    schema.field_id,
                    _location(previous),
                    _location(schema),
                )
            bundle[schema.field_id] = schema
        return bundle

    def validate(self, values: dict[str, Any], container_id: str | None = None) -> ValidationOutcome:
        """Sanitize then validate every field in the bundle."""
        outcome = ValidationOutcome(values=dict(values))
        for field_id, schema in self.resolve_schema_bundle(container_id).items():
            value = values.get(field_id)
            for sanitizer in schema.sanitizers:
                value = sanitizer.sanitize(value, schema.context, outcome.notices.setdefault(field_id, []).append)
            outcome.values[field_id] = value
            for validator in schema.validators:
                validator.validate(value, schema.context, outcome.messages.setdefault(field_id, []).append)
        outcome.messages = {k: v for k, v in outcome.messages.items() if v}
        outcome.notices = {k: v for k, v in outcome.notices.items() if v}
        return outcome


def _location(schema: FieldSchema) -> str:
    where = f"{schema.container_id}/{schema.section_id}"
    return f"{where}/{schema.group_id}" if schema.group_id else where
