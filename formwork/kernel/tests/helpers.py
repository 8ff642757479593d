"""Helpers shared by kernel tests."""

from pathlib import Path

from formwork.kernel.cache import ComponentCacheService
from formwork.kernel.loader import ComponentLoader
from formwork.kernel.manifest import ComponentManifest

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "components"
FIXTURES_PACKAGE = "formwork.kernel.tests.fixtures.components"


class RecordingEnqueuer:
    """AssetEnqueuer that records every call in order."""

    def __init__(self):
        self.calls = []

    def register_style(self, style):
        self.calls.append(("register_style", style.handle))

    def enqueue_style(self, handle):
        self.calls.append(("enqueue_style", handle))

    def register_script(self, script):
        self.calls.append(("register_script", script.handle))

    def enqueue_script(self, handle):
        self.calls.append(("enqueue_script", handle))

    def localize_script(self, handle, object_name, data):
        self.calls.append(("localize_script", handle, object_name))

    def enqueue_media(self):
        self.calls.append(("enqueue_media",))


def make_manifest(
    cache: ComponentCacheService | None = None,
    template_cache: ComponentCacheService | None = None,
) -> ComponentManifest:
    """Shipped components plus the fields.text / fields.number fixtures."""
    loader = ComponentLoader.default(cache=template_cache or ComponentCacheService(enabled=False))
    loader.register(
        "fields.text",
        FIXTURES_DIR / "fields" / "text" / "view.mustache",
        f"{FIXTURES_PACKAGE}.fields.text",
    )
    loader.register("fields.number", FIXTURES_DIR / "fields" / "number" / "view.mustache")
    return ComponentManifest(loader, cache or ComponentCacheService(enabled=False))
