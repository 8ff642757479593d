"""
Formwork kernel test configuration.

Shared fixtures:
  fixture_loader — loader over tests/fixtures/components only
  manifest       — shipped components plus fields.text / fields.number, no caching
  form           — a Form wired to that manifest
  enqueuer       — records asset registrations
"""

import pytest

from formwork.kernel.cache import ComponentCacheService
from formwork.kernel.form import Form
from formwork.kernel.loader import ComponentLoader
from formwork.kernel.tests.helpers import FIXTURES_DIR, FIXTURES_PACKAGE, RecordingEnqueuer, make_manifest


@pytest.fixture
def fixture_loader():
    return ComponentLoader(FIXTURES_DIR, FIXTURES_PACKAGE, cache=ComponentCacheService(enabled=False))


@pytest.fixture
def manifest():
    return make_manifest()


@pytest.fixture
def form(manifest):
    return Form("contact", manifest=manifest, is_dev=True)


@pytest.fixture
def enqueuer():
    return RecordingEnqueuer()
