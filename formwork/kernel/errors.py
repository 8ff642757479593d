"""
Formwork Kernel — Errors

Fatal error taxonomy. Recoverable payload problems are not exceptions;
they travel as Warning records on a DispatchResult.
"""

from __future__ import annotations


class FormworkError(Exception):
    """Base class for every error raised by the kernel."""
    pass


class InvalidArgumentError(FormworkError, ValueError):
    """A composition bug: missing identifier, non-map context, blank template key."""
    pass


class UnknownUpdateError(InvalidArgumentError):
    """An update event name with no handler, under the strict fallback policy."""
    pass


class ComponentNotFoundError(FormworkError, LookupError):
    """No render factory is registered or discoverable for an alias."""
    pass


class BuilderFactoryMissingError(FormworkError, LookupError):
    """The alias is known but has no builder factory for field()."""
    pass


class InvalidComponentResultError(FormworkError, TypeError):
    """A render factory returned something other than a ComponentRenderResult."""
    pass
