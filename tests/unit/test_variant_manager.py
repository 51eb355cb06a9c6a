"""
Unit tests for the variant manager rules.
"""

import itertools

import pytest

from domain.exceptions import InvalidParametersError, NotFoundError
from domain.models import SessionScheduleEntry, Variant, VariantItem
from domain.services import (
    label_for_index,
    plan_block_creation,
    plan_item_addition,
    plan_item_removal,
    plan_item_reorder,
    plan_next_label,
    plan_variant_creation,
    plan_variant_deletion,
    plan_variant_duplication,
    plan_variant_rename,
    select_active_label,
)


def _variants(*labels, block_id="b1"):
    return [
        Variant(id=f"{block_id}-{label}", block_id=block_id, variant_label=label, sort_order=order)
        for order, label in enumerate(labels)
    ]


def _ids(prefix="id"):
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.mark.unit
class TestLabels:

    @pytest.mark.parametrize(
        "index,label",
        [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB"), (51, "AZ"), (52, "BA")],
    )
    def test_label_for_index(self, index, label):
        assert label_for_index(index) == label

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            label_for_index(-1)

    @pytest.mark.parametrize("existing,expected", [((), "A"), (("A",), "B"), (("A", "B"), "C")])
    def test_label_follows_variant_count(self, existing, expected):
        assert plan_next_label(_variants(*existing)) == expected

    def test_label_reused_after_deleting_last(self):
        # A, B, C with C deleted: count is 2 so C comes back
        assert plan_next_label(_variants("A", "B")) == "C"

    def test_label_skips_held_letter_after_deleting_first(self):
        # B and C remain after deleting A; "C" is held so "D" is chosen
        assert plan_next_label(_variants("B", "C")) == "D"


@pytest.mark.unit
class TestActiveSelection:

    def test_deleting_active_selects_lowest_sort_order(self):
        assert select_active_label(_variants("A", "B", "C"), "A", "A") == "B"

    def test_deleting_inactive_keeps_active(self):
        assert select_active_label(_variants("A", "B", "C"), "C", "B") == "B"

    def test_remaining_ordered_by_sort_order_not_label(self):
        variants = [
            Variant(id="v1", block_id="b1", variant_label="A", sort_order=0),
            Variant(id="v2", block_id="b1", variant_label="B", sort_order=9),
            Variant(id="v3", block_id="b1", variant_label="C", sort_order=4),
        ]
        assert select_active_label(variants, "A", "A") == "C"

    def test_no_remaining_variant_rejected(self):
        with pytest.raises(InvalidParametersError):
            select_active_label(_variants("A"), "A", "A")


@pytest.mark.unit
class TestCreation:

    def test_block_created_with_variant_a(self):
        plan = plan_block_creation("Circuit", coach_id="coach-1", rounds=3, id_factory=_ids())
        assert plan.block.name == "Circuit"
        assert plan.block.rounds == 3
        assert plan.block.coach_id == "coach-1"
        assert plan.default_variant.block_id == plan.block.id
        assert plan.default_variant.variant_label == "A"
        assert plan.default_variant.name == "Variant A"
        assert plan.default_variant.sort_order == 0

    def test_variant_created_with_next_label_and_order(self):
        plan = plan_variant_creation("b1", _variants("A", "B"), id_factory=_ids())
        assert plan.variant.variant_label == "C"
        assert plan.variant.sort_order == 2
        assert plan.variant.name == "Variant C"

    def test_variant_sorts_after_sparse_orders(self):
        existing = [Variant(id="v1", block_id="b1", variant_label="A", sort_order=7)]
        plan = plan_variant_creation("b1", existing, name="Heavy", id_factory=_ids())
        assert plan.variant.sort_order == 8
        assert plan.variant.name == "Heavy"

    def test_variant_created_with_initial_items(self):
        plan = plan_variant_creation(
            "b1", _variants("A"), pairs=[("x1", "pr1"), ("x2", "pr2")], id_factory=_ids()
        )
        assert [(i.variant_id, i.exercise_id, i.sort_order) for i in plan.items] == [
            (plan.variant.id, "x1", 0),
            (plan.variant.id, "x2", 1),
        ]

    def test_variant_without_pairs_has_no_items(self):
        assert plan_variant_creation("b1", _variants("A"), id_factory=_ids()).items == []


@pytest.mark.unit
class TestDeletion:

    def test_sole_variant_deletion_refused(self):
        plan = plan_variant_deletion("b1-A", _variants("A"), "A")
        assert plan.allowed is False
        assert plan.reason == "A block must keep at least one variant"
        assert plan.new_active_label == "A"

    def test_delete_active_a_makes_b_active(self):
        plan = plan_variant_deletion("b1-A", _variants("A", "B"), "A")
        assert plan.allowed is True
        assert plan.deleted_label == "A"
        assert plan.new_active_label == "B"
        assert plan.active_changed is True

    def test_delete_inactive_keeps_active(self):
        plan = plan_variant_deletion("b1-B", _variants("A", "B"), "A")
        assert plan.new_active_label == "A"
        assert plan.active_changed is False

    def test_orphaned_sessions_reported(self):
        schedule = [
            SessionScheduleEntry(block_id="b1", session_number=n, variant_label=label)
            for n, label in enumerate(["A", "B", "A", "B"], start=1)
        ]
        plan = plan_variant_deletion("b1-B", _variants("A", "B"), "A", schedule=schedule)
        assert plan.orphaned_sessions == [2, 4]

    def test_unknown_variant_not_found(self):
        with pytest.raises(NotFoundError):
            plan_variant_deletion("nope", _variants("A", "B"), "A")


@pytest.mark.unit
class TestDuplication:

    def test_duplicate_copies_items_under_next_label(self):
        variants = _variants("A", "B")
        variants[0] = variants[0].model_copy(update={"notes": "slow tempo"})
        items = [
            VariantItem(id="i2", variant_id="b1-A", exercise_id="x2", protocol_id="pr2", sort_order=5),
            VariantItem(id="i1", variant_id="b1-A", exercise_id="x1", protocol_id="pr1", sort_order=1),
            VariantItem(id="i9", variant_id="b1-B", exercise_id="y1", protocol_id="pr1", sort_order=0),
        ]
        plan = plan_variant_duplication("b1-A", variants, items, id_factory=_ids("new"))

        assert plan.source_variant_id == "b1-A"
        assert plan.variant.variant_label == "C"
        assert plan.variant.notes == "slow tempo"
        assert [(i.exercise_id, i.sort_order) for i in plan.items] == [("x1", 1), ("x2", 5)]
        assert all(i.variant_id == plan.variant.id for i in plan.items)
        assert {i.id for i in plan.items}.isdisjoint({"i1", "i2"})

    def test_duplicate_unknown_variant_not_found(self):
        with pytest.raises(NotFoundError):
            plan_variant_duplication("nope", _variants("A"), [])


@pytest.mark.unit
class TestRenameAndReorder:

    def test_rename_sets_name(self):
        variant = _variants("B")[0]
        plan = plan_variant_rename(variant, name="  Light day ")
        assert plan.changes == {"name": "Light day"}

    def test_empty_name_resets_to_default(self):
        plan = plan_variant_rename(_variants("B")[0], name="", notes="")
        assert plan.changes == {"name": "Variant B", "notes": None}

    def test_rename_without_changes_rejected(self):
        with pytest.raises(InvalidParametersError):
            plan_variant_rename(_variants("A")[0])

    def test_reorder_returns_only_moved_items(self):
        items = [
            VariantItem(id=f"i{n}", variant_id="v", exercise_id=f"x{n}", protocol_id="p", sort_order=n)
            for n in range(3)
        ]
        changes = plan_item_reorder(items, ["i0", "i2", "i1"])
        assert [(c.id, c.sort_order) for c in changes] == [("i2", 1), ("i1", 2)]

    def test_reorder_densifies_sparse_orders(self):
        items = [
            VariantItem(id="a", variant_id="v", exercise_id="x", protocol_id="p", sort_order=10),
            VariantItem(id="b", variant_id="v", exercise_id="y", protocol_id="p", sort_order=20),
        ]
        changes = plan_item_reorder(items, ["a", "b"])
        assert [(c.id, c.sort_order) for c in changes] == [("a", 0), ("b", 1)]

    @pytest.mark.parametrize("ordered", [["i0"], ["i0", "i1", "i1"], ["i0", "i1", "zz"]])
    def test_reorder_requires_exact_item_set(self, ordered):
        items = [
            VariantItem(id=f"i{n}", variant_id="v", exercise_id="x", protocol_id="p", sort_order=n)
            for n in range(2)
        ]
        with pytest.raises(InvalidParametersError):
            plan_item_reorder(items, ordered)


def _items(*orders, variant_id="v1"):
    return [
        VariantItem(id=f"i{n}", variant_id=variant_id, exercise_id=f"x{n}", protocol_id="pr1", sort_order=order)
        for n, order in enumerate(orders)
    ]


@pytest.mark.unit
class TestItemEdits:

    def test_added_item_sorts_after_last(self):
        variant = _variants("A")[0].model_copy(update={"id": "v1"})
        plan = plan_item_addition(variant, _items(0, 4, 2), "x9", "pr2", id_factory=_ids())
        assert plan.item.sort_order == 5
        assert plan.item.variant_id == "v1"

    def test_first_item_starts_at_zero(self):
        variant = _variants("A")[0]
        plan = plan_item_addition(variant, [], "x9", "pr2", id_factory=_ids())
        assert plan.item.sort_order == 0

    def test_items_of_other_variants_ignored(self):
        variant = _variants("A")[0].model_copy(update={"id": "v1"})
        items = _items(0) + _items(9, variant_id="v2")
        plan = plan_item_addition(variant, items, "x9", "pr2", id_factory=_ids())
        assert plan.item.sort_order == 1

    @pytest.mark.parametrize("exercise_id,protocol_id", [("", "pr1"), ("x1", "  ")])
    def test_blank_reference_rejected(self, exercise_id, protocol_id):
        with pytest.raises(InvalidParametersError):
            plan_item_addition(_variants("A")[0], [], exercise_id, protocol_id)

    def test_remove_item(self):
        plan = plan_item_removal("i1", _items(0, 1, 2))
        assert plan.allowed is True
        assert plan.remaining_items == 2
        assert plan.variant_id == "v1"

    def test_last_item_removal_refused(self):
        plan = plan_item_removal("i0", _items(0))
        assert plan.allowed is False
        assert plan.remaining_items == 1
        assert plan.reason

    def test_remove_unknown_item_not_found(self):
        with pytest.raises(NotFoundError):
            plan_item_removal("zz", _items(0, 1))
