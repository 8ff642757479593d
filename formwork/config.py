"""
Formwork configuration — all environment variables in one place.

Read from environment at runtime. Every consumer also accepts an explicit
override, so nothing in the kernel requires these to be set.
"""

from __future__ import annotations

import os

_TRUTHY = {"1", "true", "yes", "on"}

# Minimum TTL for cached component metadata (seconds)
MIN_COMPONENT_CACHE_TTL = 300

_DEFAULT_TTLS: dict[str, int] = {
    "development": 300,
    "staging": 1800,
    "production": 3600,
}


def _flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


class Settings:
    """Formwork settings from environment variables."""

    # Cache namespace for component metadata and template sources
    COMPONENT_CACHE_PREFIX: str = "formwork_component_"
    TEMPLATE_CACHE_PREFIX: str = "formwork_template_"

    @property
    def ENVIRONMENT(self) -> str:
        return os.environ.get("FORMWORK_ENVIRONMENT", "production").strip().lower() or "production"

    @property
    def COMPONENT_CACHE_DISABLED(self) -> bool:
        return _flag("FORMWORK_COMPONENT_CACHE_DISABLED")

    @property
    def COMPONENT_CACHE_TTL(self) -> int:
        raw = os.environ.get("FORMWORK_COMPONENT_CACHE_TTL")
        if raw:
            try:
                return max(MIN_COMPONENT_CACHE_TTL, int(raw))
            except ValueError:
                pass
        return _DEFAULT_TTLS.get(self.ENVIRONMENT, _DEFAULT_TTLS["production"])

    @property
    def VERBOSE_DEBUG(self) -> bool:
        return _flag("FORMWORK_VERBOSE_DEBUG")

    @property
    def STRICT_UPDATES(self) -> bool:
        return _flag("FORMWORK_STRICT_UPDATES")

    @property
    def is_dev_environment(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def caching_enabled(self) -> bool:
        if self.COMPONENT_CACHE_DISABLED:
            return False
        return not self.is_dev_environment


# Singleton instance
settings = Settings()
