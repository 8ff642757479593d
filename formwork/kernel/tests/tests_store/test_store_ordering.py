"""
State Store -- Ordering Tests

Sorting is always (order ascending, index ascending):
  - A(30), B(10), C(20) registered in that sequence iterate as B, C, A
  - equal or omitted orders keep registration sequence
  - sections and groups sort the same way
  - submit controls re-sort on every update, stable for equal orders
"""

from formwork.kernel.store import FormsStateStore
from formwork.kernel.types import ControlData, FieldData, GroupData, SectionData


def _ids(fields):
    return [f.field_id for f in fields]


class TestFieldOrdering:
    def test_explicit_orders_sort_ascending(self):
        store = FormsStateStore()
        for field_id, order in [("A", 30), ("B", 10), ("C", 20)]:
            store.upsert_field("page", "s1", None, FieldData(id=field_id, component="x", order=order))

        assert _ids(store.get_fields("page", "s1")) == ["B", "C", "A"]

    def test_omitted_orders_keep_registration_sequence(self):
        store = FormsStateStore()
        for field_id in ["z", "a", "m"]:
            store.upsert_field("page", "s1", None, FieldData(id=field_id, component="x"))

        assert _ids(store.get_fields("page", "s1")) == ["z", "a", "m"]

    def test_ties_break_by_index(self):
        store = FormsStateStore()
        store.upsert_field("page", "s1", None, FieldData(id="late", component="x", order=10))
        store.upsert_field("page", "s1", None, FieldData(id="early", component="x", order=5))
        store.upsert_field("page", "s1", None, FieldData(id="later", component="x", order=10))

        assert _ids(store.get_fields("page", "s1")) == ["early", "late", "later"]

    def test_reupsert_without_order_does_not_move_field(self):
        store = FormsStateStore()
        for field_id, order in [("A", 30), ("B", 10), ("C", 20)]:
            store.upsert_field("page", "s1", None, FieldData(id=field_id, component="x", order=order))

        store.upsert_field("page", "s1", None, FieldData(id="A", component="x", component_context={"new": True}))

        assert _ids(store.get_fields("page", "s1")) == ["B", "C", "A"]

    def test_section_fields_exclude_group_fields(self):
        store = FormsStateStore()
        store.upsert_field("page", "s1", None, FieldData(id="loose", component="x"))
        store.upsert_field("page", "s1", "g1", FieldData(id="grouped", component="x"))

        assert _ids(store.get_fields("page", "s1")) == ["loose"]
        assert _ids(store.get_group_fields("page", "s1", "g1")) == ["grouped"]


class TestSectionAndGroupOrdering:
    def test_sections_sort_by_order_then_index(self):
        store = FormsStateStore()
        store.set_section("page", "first", SectionData(order=10))
        store.set_section("page", "second", SectionData())
        store.set_section("page", "third", SectionData(order=10))

        assert [s.section_id for s in store.get_sections("page")] == ["second", "first", "third"]

    def test_sections_are_scoped_to_container(self):
        store = FormsStateStore()
        store.set_section("page", "s1", SectionData())
        store.set_section("other", "s2", SectionData())

        assert [s.section_id for s in store.get_sections("page")] == ["s1"]

    def test_groups_sort_by_order(self):
        store = FormsStateStore()
        store.set_group("page", "s1", "g1", GroupData(order=2))
        store.set_group("page", "s1", "g2", GroupData(order=1))

        assert [g.group_id for g in store.get_groups("page", "s1")] == ["g2", "g1"]


class TestSubmitControlOrdering:
    def test_controls_sort_by_order(self):
        store = FormsStateStore()
        controls = [
            ControlData(id="cancel", label="Cancel", component="elements.button", order=20),
            ControlData(id="save", label="Save", component="elements.button", order=10),
        ]

        zone = store.set_submit_controls("page", "primary-controls", controls)

        assert [c.id for c in zone.controls] == ["save", "cancel"]

    def test_equal_orders_keep_relative_position(self):
        store = FormsStateStore()
        controls = [
            ControlData(id=control_id, label=control_id, component="elements.button", order=0)
            for control_id in ["b", "a", "c"]
        ]

        zone = store.set_submit_controls("page", "primary-controls", controls)

        assert [c.id for c in zone.controls] == ["b", "a", "c"]

    def test_zone_hooks_survive_control_updates(self):
        store = FormsStateStore()
        hook = lambda ctx: "<p>before</p>"  # noqa: E731
        store.set_submit_controls("page", "primary-controls", before=hook)

        zone = store.set_submit_controls(
            "page", "primary-controls", [ControlData(id="save", label="Save", component="elements.button")]
        )

        assert zone.before is hook
        assert [c.id for c in zone.controls] == ["save"]

    def test_zone_without_control_list_keeps_controls(self):
        store = FormsStateStore()
        store.set_submit_controls(
            "page", "primary-controls", [ControlData(id="save", label="Save", component="elements.button")]
        )

        zone = store.set_submit_controls("page", "primary-controls")

        assert [c.id for c in zone.controls] == ["save"]
