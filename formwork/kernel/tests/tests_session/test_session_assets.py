"""
Render Session -- Asset Tests

Covers the FormsAssets bucket (dedup by handle, last write wins, immediate
vs deferred) and the session's enqueue passes against a recording enqueuer.
"""

import pytest

from formwork.kernel.assets import FormsAssets
from formwork.kernel.results import ComponentRenderResult, ScriptDefinition, StyleDefinition
from formwork.kernel.session import FormsServiceSession


@pytest.fixture
def session(manifest):
    return FormsServiceSession(manifest)


class TestAssetBucket:
    def test_same_handle_is_kept_once(self):
        assets = FormsAssets()
        assets.add_style(StyleDefinition(handle="a", src="one.css"))
        assets.add_style(StyleDefinition(handle="a", src="two.css"))

        assert [s.src for s in assets.styles()] == ["two.css"]

    def test_last_write_moves_between_tables(self):
        assets = FormsAssets()
        assets.add_script(ScriptDefinition(handle="js", src="a.js"))
        assets.add_script(ScriptDefinition(handle="js", src="a.js", hook="footer"))

        assert assets.scripts() == []
        assert [s.handle for s in assets.deferred_scripts("footer")] == ["js"]

    def test_deferred_filtered_by_hook(self):
        assets = FormsAssets()
        assets.add_style(StyleDefinition(handle="a", hook="footer"))
        assets.add_style(StyleDefinition(handle="b", hook="modal"))

        assert [s.handle for s in assets.deferred_styles("modal")] == ["b"]
        assert len(assets.deferred_styles()) == 2

    def test_ingest_result(self):
        assets = FormsAssets()
        assets.ingest(
            ComponentRenderResult(
                markup="",
                styles=[StyleDefinition(handle="s")],
                scripts=[ScriptDefinition(handle="j")],
                requires_media=True,
            )
        )

        assert assets.handles() == {"styles": ["s"], "deferred_styles": [], "scripts": ["j"], "deferred_scripts": []}
        assert assets.requires_media()
        assert not assets.is_empty()

    def test_empty_bucket(self):
        assert FormsAssets().is_empty()


class TestEnqueue:
    def test_rendering_collects_declared_assets(self, session):
        session.render_component("fields.text", {"id": "a", "name": "a"})

        assert session.assets.handles()["styles"] == ["fixture-text"]
        assert session.assets.handles()["deferred_scripts"] == ["fixture-text-js"]

    def test_rendering_twice_does_not_duplicate(self, session, enqueuer):
        session.render_component("fields.text", {"id": "a", "name": "a"})
        session.render_component("fields.text", {"id": "b", "name": "b"})

        session.enqueue_assets(enqueuer)

        assert enqueuer.calls.count(("enqueue_style", "fixture-text")) == 1

    def test_immediate_enqueued_deferred_registered(self, session, enqueuer):
        session.render_component("fields.text", {"id": "a", "name": "a"})

        flushed = session.enqueue_assets(enqueuer)

        assert flushed == 1
        assert enqueuer.calls == [
            ("register_style", "fixture-text"),
            ("enqueue_style", "fixture-text"),
            ("register_script", "fixture-text-js"),
        ]

    def test_enqueue_is_idempotent(self, session, enqueuer):
        session.render_component("fields.text", {"id": "a", "name": "a"})
        session.enqueue_assets(enqueuer)
        calls = list(enqueuer.calls)

        assert session.enqueue_assets(enqueuer) == 0
        assert enqueuer.calls == calls

    def test_deferred_flush_on_hook(self, session, enqueuer):
        session.render_component("fields.text", {"id": "a", "name": "a"})
        session.enqueue_assets(enqueuer)

        assert session.enqueue_deferred_assets("header", enqueuer) == 0
        assert session.enqueue_deferred_assets("footer", enqueuer) == 1
        assert session.enqueue_deferred_assets("footer", enqueuer) == 0
        assert enqueuer.calls.count(("register_script", "fixture-text-js")) == 1
        assert enqueuer.calls[-1] == ("enqueue_script", "fixture-text-js")

    def test_media_and_localized_scripts(self, session, manifest, enqueuer):
        manifest.register(
            "custom.uploader",
            lambda ctx: ComponentRenderResult(
                markup="",
                scripts=[ScriptDefinition(handle="up", localize={"uploaderConfig": {"max": 3}})],
                requires_media=True,
            ),
        )
        session.render_component("custom.uploader", {})

        session.enqueue_assets(enqueuer)
        session.enqueue_assets(enqueuer)

        assert ("localize_script", "up", "uploaderConfig") in enqueuer.calls
        assert enqueuer.calls.count(("enqueue_media",)) == 1

    def test_assets_added_after_first_flush(self, session, manifest, enqueuer):
        manifest.register(
            "custom.late", lambda ctx: ComponentRenderResult(markup="", styles=[StyleDefinition(handle="late")])
        )
        session.render_component("fields.text", {"id": "a", "name": "a"})
        session.enqueue_assets(enqueuer)

        session.render_component("custom.late", {})

        assert session.enqueue_assets(enqueuer) == 1
        assert enqueuer.calls[-1] == ("enqueue_style", "late")

    def test_immediate_handle_redeclared_with_hook_is_flushed_on_hook(self, session, enqueuer):
        session.assets.add_style(StyleDefinition(handle="shared"))
        session.enqueue_assets(enqueuer)

        session.assets.add_style(StyleDefinition(handle="shared", hook="footer"))

        assert session.enqueue_deferred_assets("footer", enqueuer) == 1
        assert enqueuer.calls[-1] == ("enqueue_style", "shared")
        assert session.enqueue_deferred_assets("footer", enqueuer) == 0


class TestMemoTables:
    def test_catalogue_is_memoized_until_cleared(self, session, manifest):
        first = session.catalogue()
        assert session.catalogue() is first

        session.schema_bundle_cache["*"] = {}
        session.clear_caches()

        assert session.schema_bundle_cache == {}
        assert session.catalogue() is not first
