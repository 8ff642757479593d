"""
Update Handlers Tests

Drives create_update_router() with raw payloads and checks the store and
session afterwards. No builders involved.
"""

import pytest

from formwork.kernel.errors import InvalidArgumentError
from formwork.kernel.router import raise_unknown_update
from formwork.kernel.session import FormsServiceSession
from formwork.kernel.store import FormsStateStore
from formwork.kernel.tests.helpers import make_manifest
from formwork.kernel.updates import create_update_router


@pytest.fixture
def store():
    return FormsStateStore()


@pytest.fixture
def session():
    return FormsServiceSession(make_manifest())


@pytest.fixture
def router(store, session):
    return create_update_router(store, session)


def _codes(result):
    return [w.code for w in result.warnings]


class TestStructureHandlers:
    def test_section_then_fields(self, router, store):
        router.dispatch("section", {"container_id": "page", "section_id": "s1", "section_data": {"heading": "Main"}})
        router.dispatch(
            "field",
            {
                "container_id": "page",
                "section_id": "s1",
                "field_data": {"id": "name", "component": "fields.text", "label": "Name"},
            },
        )

        assert store.get_section("page", "s1").title == "Main"
        assert store.get_field("page", "s1", "name").label == "Name"

    def test_section_metadata_reads_group_data(self, router, store):
        router.dispatch("section", {"container_id": "page", "section_id": "s1", "section_data": {"heading": "Main"}})
        router.dispatch("section_metadata", {"container_id": "page", "section_id": "s1", "group_data": {"order": 7}})

        section = store.get_section("page", "s1")
        assert section.order == 7
        assert section.title == "Main"

    def test_section_metadata_creates_missing_section(self, router, store):
        router.dispatch("section_metadata", {"container_id": "page", "section_id": "late", "group_data": {"order": 3}})

        assert store.get_section("page", "late").order == 3

    def test_group_with_fields(self, router, store):
        router.dispatch(
            "group",
            {
                "container_id": "page",
                "section_id": "s1",
                "group_id": "g1",
                "group_data": {
                    "heading": "Contact",
                    "type": "fieldset",
                    "fields": [{"id": "email", "component": "fields.text"}],
                },
            },
        )

        group = store.get_group("page", "s1", "g1")
        assert group.title == "Contact"
        assert group.is_fieldset
        assert [f.field_id for f in store.get_group_fields("page", "s1", "g1")] == ["email"]

    def test_group_field_and_metadata(self, router, store):
        router.dispatch(
            "group_field",
            {
                "container_id": "page",
                "section_id": "s1",
                "group_id": "g1",
                "field_data": {"id": "zip", "component": "fields.number", "order": 4},
            },
        )
        router.dispatch(
            "group_metadata",
            {"container_id": "page", "section_id": "s1", "group_id": "g1", "group_data": {"required": True}},
        )

        assert store.get_group("page", "s1", "g1").required is True
        assert store.get_field("page", "s1", "zip", group_id="g1").order == 4


class TestSectionCleanup:
    def test_known_section_calls_hook(self, store, session):
        released = []
        router = create_update_router(store, session, on_section_cleanup=released.append)
        router.dispatch("section", {"container_id": "page", "section_id": "s1", "section_data": {}})

        result = router.dispatch("section_cleanup", {"section_id": "s1"})

        assert result.handled
        assert result.warnings == []
        assert released == ["s1"]

    def test_unknown_section_warns(self, store, session):
        released = []
        router = create_update_router(store, session, on_section_cleanup=released.append)

        result = router.dispatch("section_cleanup", {"section_id": "ghost"})

        assert _codes(result) == ["UNKNOWN_SECTION"]
        assert released == []


class TestTemplateOverrideHandler:
    def test_field_override(self, router, session):
        router.dispatch(
            "template_override",
            {"element_type": "field", "element_id": "email", "overrides": {"field-wrapper": "custom.field"}},
        )

        assert session.resolve_template("field-wrapper", {"field_id": "email"}) == "custom.field"

    def test_overrides_merge_per_element(self, router, session):
        router.dispatch(
            "template_override",
            {"element_type": "section", "element_id": "s1", "overrides": {"section-wrapper": "a.section"}},
        )
        router.dispatch(
            "template_override",
            {"element_type": "section", "element_id": "s1", "overrides": {"field-wrapper": "a.field"}},
        )

        assert session.get_individual_element_overrides("section", "s1") == {
            "section-wrapper": "a.section",
            "field-wrapper": "a.field",
        }

    def test_root_callback_set_and_unset(self, router, session):
        callback = lambda ctx: "<form></form>"  # noqa: E731
        router.dispatch("template_override", {"element_type": "root", "element_id": "page", "callback": callback})
        assert session.get_root_template_callback("page") is callback

        router.dispatch("template_override", {"element_type": "root", "element_id": "page", "callback": None})

        assert session.get_root_template_callback("page") is None

    def test_callback_none_keeps_root_overrides(self, router, session):
        router.dispatch(
            "template_override",
            {"element_type": "root", "element_id": "page", "overrides": {"root-wrapper": "custom.root"}},
        )

        router.dispatch("template_override", {"element_type": "root", "element_id": "page", "callback": None})

        assert session.get_individual_element_overrides("root", "page") == {"root-wrapper": "custom.root"}

    def test_root_template_override_replaces_callback(self, router, session):
        router.dispatch("template_override", {"element_type": "root", "element_id": "page", "callback": lambda ctx: ""})

        router.dispatch(
            "template_override",
            {"element_type": "root", "element_id": "page", "overrides": {"root-wrapper": "custom.root"}},
        )

        assert session.get_root_template_callback("page") is None
        assert session.get_individual_element_overrides("root", "page") == {"root-wrapper": "custom.root"}

    def test_zone_override_keeps_root_callback(self, router, session):
        callback = lambda ctx: ""  # noqa: E731
        router.dispatch("template_override", {"element_type": "root", "element_id": "page", "callback": callback})

        router.dispatch(
            "template_override",
            {
                "element_type": "root",
                "element_id": "page",
                "zone_id": "primary-controls",
                "overrides": {"submit-controls-wrapper": "custom.controls"},
            },
        )

        assert session.get_root_template_callback("page") is callback

    def test_empty_root_override_clears_everything(self, router, session):
        router.dispatch(
            "template_override",
            {
                "element_type": "root",
                "element_id": "page",
                "overrides": {"root-wrapper": "custom.root"},
                "callback": lambda ctx: "",
            },
        )

        result = router.dispatch("template_override", {"element_type": "root", "element_id": "page", "overrides": {}})

        assert result.warnings == []
        assert session.get_root_template_callback("page") is None
        assert session.get_individual_element_overrides("root", "page") == {}

    def test_callback_on_non_root_warns(self, router, session):
        result = router.dispatch(
            "template_override",
            {
                "element_type": "section",
                "element_id": "s1",
                "overrides": {"section-wrapper": "a.section"},
                "callback": lambda ctx: "",
            },
        )

        assert "CALLBACK_NOT_SUPPORTED" in _codes(result)
        assert session.get_individual_element_overrides("section", "s1") == {"section-wrapper": "a.section"}

    def test_empty_non_root_override_warns(self, router):
        result = router.dispatch("template_override", {"element_type": "group", "element_id": "g1", "overrides": {}})

        assert _codes(result) == ["EMPTY_OVERRIDE"]

    def test_zone_override(self, router, session):
        router.dispatch(
            "template_override",
            {
                "element_type": "root",
                "element_id": "page",
                "zone_id": "primary-controls",
                "overrides": {"submit-controls-wrapper": "custom.controls"},
            },
        )

        context = {"root_id": "page", "zone_id": "primary-controls"}
        assert session.resolve_template("submit-controls-wrapper", context) == "custom.controls"
        assert session.get_individual_element_overrides("root", "page") == {}

    def test_unknown_element_type_is_fatal(self, router):
        with pytest.raises(InvalidArgumentError):
            router.dispatch(
                "template_override",
                {"element_type": "widget", "element_id": "w1", "overrides": {"field-wrapper": "x.y"}},
            )


class TestFormDefaultsHandler:
    def test_defaults_merge(self, router, session):
        router.dispatch("form_defaults_override", {"overrides": {"field-wrapper": "default.field"}})
        router.dispatch("form_defaults_override", {"overrides": {"section-wrapper": "default.section"}})

        assert session.get_form_defaults() == {
            "field-wrapper": "default.field",
            "section-wrapper": "default.section",
        }

    def test_empty_defaults_warn(self, router):
        result = router.dispatch("form_defaults_override", {"overrides": {}})

        assert _codes(result) == ["EMPTY_OVERRIDE"]


class TestSubmitControlsHandlers:
    def test_zone_then_controls(self, router, store):
        before = lambda ctx: "<p>Almost done</p>"  # noqa: E731
        router.dispatch("submit_controls_zone", {"container_id": "page", "zone_id": "primary-controls", "before": before})
        router.dispatch(
            "submit_controls_set",
            {
                "container_id": "page",
                "zone_id": "primary-controls",
                "controls": [
                    {"id": "cancel", "label": "Cancel", "component": "elements.button", "order": 20},
                    {"id": "save", "label": "Save", "component": "elements.button", "order": 10},
                ],
            },
        )

        zone = store.get_submit_controls("page")
        assert zone.before is before
        assert [c.id for c in zone.controls] == ["save", "cancel"]

    def test_set_creates_zone(self, router, store):
        router.dispatch(
            "submit_controls_set",
            {
                "container_id": "page",
                "zone_id": "primary-controls",
                "controls": [{"id": "save", "label": "Save", "component": "elements.button"}],
            },
        )

        assert store.has_submit_controls("page")

    def test_malformed_control_is_skipped(self, router, store):
        result = router.dispatch(
            "submit_controls_set",
            {
                "container_id": "page",
                "zone_id": "primary-controls",
                "controls": [
                    {"id": "save", "label": "Save", "component": "elements.button"},
                    {"label": "No id", "component": "elements.button"},
                    "not a control",
                ],
            },
        )

        assert _codes(result) == ["MALFORMED_CONTROL", "MALFORMED_CONTROL"]
        assert [c.id for c in store.get_submit_controls("page").controls] == ["save"]


class TestFallbackWiring:
    def test_strict_router_raises(self, store, session):
        router = create_update_router(store, session, fallback=raise_unknown_update)

        with pytest.raises(InvalidArgumentError):
            router.dispatch("mystery", {})

    def test_all_builder_events_registered(self, router):
        assert set(router.names()) >= {
            "section",
            "section_metadata",
            "field",
            "group",
            "group_field",
            "group_metadata",
            "template_override",
            "form_defaults_override",
            "submit_controls_zone",
            "submit_controls_set",
            "section_cleanup",
        }
