"""
Formwork Kernel — Update Router

Dispatches named builder events to handler functions by exact name match.
Names with no handler reach a single fallback with (name, data); nothing is
dropped silently. The fallback either logs or raises, depending on policy.

Handlers receive a typed event (see events.parse_event) and return a list of
warnings, or None. Warnings are logged here and returned on the result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from formwork.kernel.errors import InvalidArgumentError, UnknownUpdateError
from formwork.kernel.events import parse_event
from formwork.kernel.types import BuilderEvent, DispatchResult, Warning

logger = logging.getLogger(__name__)

Handler = Callable[[BuilderEvent], list[Warning] | None]
Fallback = Callable[[str, Any], None]


# ---------------------------------------------------------------------------
# Fallback policies
# ---------------------------------------------------------------------------


def log_unknown_update(name: str, data: Any) -> None:
    keys = sorted(data) if isinstance(data, dict) else []
    logger.warning("UpdateRouter: no handler for update %r (keys: %s)", name, keys)


def raise_unknown_update(name: str, data: Any) -> None:
    raise UnknownUpdateError(f'Unknown update type "{name}".')


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class UpdateRouter:
    """Name → handler table with a fallback for everything else."""

    def __init__(self, fallback: Fallback | None = None) -> None:
        self._handlers: dict[str, Handler] = {}
        self._fallback: Fallback = fallback or log_unknown_update

    def register(self, name: str, handler: Handler) -> None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("UpdateRouter: event name cannot be empty.")
        if not callable(handler):
            raise InvalidArgumentError(f'UpdateRouter: handler for "{name}" must be callable.')
        self._handlers[name] = handler

    def has(self, name: str) -> bool:
        return name in self._handlers

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def set_fallback(self, fallback: Fallback) -> None:
        self._fallback = fallback

    def dispatch(self, name: str, data: Any) -> DispatchResult:
        """
        Route one event. Fatal payload errors propagate to the caller;
        recoverable ones come back as warnings on the result.
        """
        handler = self._handlers.get(name)
        if handler is None:
            self._fallback(name, data)
            return DispatchResult(name=name, handled=False)

        warnings: list[Warning] = []
        event = parse_event(name, data, warnings)
        warnings.extend(handler(event) or [])

        for w in warnings:
            logger.warning("UpdateRouter: %s [%s] %s", name, w.code, w.message)
        return DispatchResult(name=name, handled=True, warnings=warnings)

    def update_function(self) -> Callable[[str, Any], DispatchResult]:
        """The callable builders hold on to for emitting events."""
        return self.dispatch
