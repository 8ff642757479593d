"""
Form Tests

Composition root behaviour: construction checks, template helpers, the
build() boundary that turns callback failures into a notice, strict update
handling and environment-driven settings.
"""

import logging

import pytest

from formwork.config import Settings
from formwork.kernel.errors import InvalidArgumentError, UnknownUpdateError
from formwork.kernel.form import Form
from formwork.kernel.notices import PRODUCTION_MESSAGE, render_error_notice
from formwork.kernel.results import ComponentRenderResult


class TestConstruction:
    def test_blank_id_rejected(self, manifest):
        with pytest.raises(InvalidArgumentError):
            Form("  ", manifest=manifest)

    def test_unknown_kind_rejected(self, manifest):
        with pytest.raises(InvalidArgumentError, match="kind"):
            Form("contact", kind="wizard", manifest=manifest)

    def test_collection_kind(self, manifest):
        form = Form("products", kind="collection", manifest=manifest)

        assert form.store.containers() == ["products"]


class TestTemplateHelpers:
    def test_root_template(self, form, manifest):
        manifest.register("custom.root", lambda ctx: ComponentRenderResult(markup=f"<main>{ctx['inner_html']}</main>"))
        form.template("custom.root")
        form.section("details").raw_html("x")

        assert form.render().startswith("<main><section")

    def test_root_callback_and_removal(self, form):
        form.root_callback(lambda ctx: f"<form id=\"{ctx['form_id']}\"></form>")
        assert form.render() == '<form id="contact"></form>'

        form.root_callback(None)
        assert form.render().startswith('<div class="formwork-form"')

    def test_root_template_after_callback_wins(self, form, manifest):
        manifest.register("custom.root", lambda ctx: ComponentRenderResult(markup="template"))
        form.root_callback(lambda ctx: "callback")

        form.template("custom.root")

        assert form.render() == "template"

    def test_clear_root_template(self, form, manifest):
        manifest.register("custom.root", lambda ctx: ComponentRenderResult(markup="custom"))
        form.template("custom.root").root_callback(lambda ctx: "callback")

        form.clear_root_template()

        assert form.render().startswith('<div class="formwork-form"')

    def test_default_templates(self, form):
        form.default_template("field-wrapper", "default.field").default_templates({"section-wrapper": "default.section"})

        assert form.session.get_form_defaults() == {
            "field-wrapper": "default.field",
            "section-wrapper": "default.section",
        }

    def test_form_defaults_argument(self, manifest):
        form = Form("contact", manifest=manifest, form_defaults={"field-wrapper": "default.field"})

        assert form.session.resolve_template("field-wrapper", {"field_id": "x"}) == "default.field"


class TestBuildBoundary:
    def test_successful_build(self, form):
        assert form.build(lambda f: f.section("details").field("name", "Name", "fields.text")) is True
        assert form.build_error is None
        assert 'data-field-id="name"' in form.render()

    def test_failing_callback_is_logged_and_rendered_as_notice(self, form, caplog):
        def callback(f):
            f.section("details").field("age", "Age", "fields.number")

        with caplog.at_level(logging.ERROR, logger="formwork.kernel.form"):
            assert form.build(callback) is False

        assert "contact" in caplog.text
        assert "details" in caplog.text
        assert caplog.records[-1].exc_info is not None

        markup = form.render()
        assert markup.startswith('<div class="formwork-fallback" data-formwork-root="contact">')
        assert "BuilderFactoryMissingError" in markup
        assert "Form build failed" in markup

    def test_production_notice_hides_details(self, manifest):
        form = Form("contact", manifest=manifest, is_dev=False)
        form.build(lambda f: 1 / 0)

        markup = form.render()

        assert "ZeroDivisionError" not in markup
        assert PRODUCTION_MESSAGE in markup
        assert "Form unavailable" in markup

    def test_notice_escapes_message(self):
        markup = render_error_notice(ValueError("<b>bad</b>"), "Oops", "Field", "<x>", is_dev=True)

        assert "&lt;b&gt;bad&lt;/b&gt;" in markup
        assert "<code>&lt;x&gt;</code>" in markup


class TestUnknownUpdates:
    def test_lenient_by_default(self, form, caplog):
        with caplog.at_level(logging.WARNING, logger="formwork.kernel.router"):
            result = form.update("analytics_ping", {"page": 1})

        assert result.handled is False
        assert "analytics_ping" in caplog.text

    def test_strict_argument(self, manifest):
        form = Form("contact", manifest=manifest, strict=True)

        with pytest.raises(UnknownUpdateError):
            form.update("analytics_ping", {})

    def test_strict_from_environment(self, manifest, monkeypatch):
        monkeypatch.setenv("FORMWORK_STRICT_UPDATES", "true")
        form = Form("contact", manifest=manifest)

        with pytest.raises(UnknownUpdateError):
            form.update("analytics_ping", {})

    def test_custom_fallback(self, manifest):
        seen = []
        form = Form("contact", manifest=manifest, fallback=lambda name, data: seen.append(name))

        form.update("analytics_ping", {})

        assert seen == ["analytics_ping"]


class TestAssetsThroughForm:
    def test_render_with_enqueuer(self, form, enqueuer):
        form.section("details").field("name", "Name", "fields.text")

        form.render(enqueuer=enqueuer)
        form.enqueue_assets(enqueuer)

        assert enqueuer.calls.count(("enqueue_style", "fixture-text")) == 1


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("FORMWORK_ENVIRONMENT", "FORMWORK_COMPONENT_CACHE_TTL", "FORMWORK_COMPONENT_CACHE_DISABLED"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()

        assert settings.ENVIRONMENT == "production"
        assert settings.COMPONENT_CACHE_TTL == 3600
        assert settings.caching_enabled is True

    def test_development(self, monkeypatch):
        monkeypatch.setenv("FORMWORK_ENVIRONMENT", "Development")
        monkeypatch.delenv("FORMWORK_COMPONENT_CACHE_TTL", raising=False)
        settings = Settings()

        assert settings.is_dev_environment
        assert settings.caching_enabled is False
        assert settings.COMPONENT_CACHE_TTL == 300

    def test_ttl_has_a_floor(self, monkeypatch):
        monkeypatch.setenv("FORMWORK_COMPONENT_CACHE_TTL", "10")

        assert Settings().COMPONENT_CACHE_TTL == 300

    def test_bad_ttl_uses_environment_default(self, monkeypatch):
        monkeypatch.setenv("FORMWORK_ENVIRONMENT", "staging")
        monkeypatch.setenv("FORMWORK_COMPONENT_CACHE_TTL", "soon")

        assert Settings().COMPONENT_CACHE_TTL == 1800
