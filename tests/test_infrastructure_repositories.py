"""
Tests for the Supabase repository implementations.

The Supabase client is replaced by MagicMock query chains, so these tests
verify table/RPC usage and row conversion without a database.
"""
import json

import pytest
from typing import Any, Dict, List
from unittest.mock import MagicMock

from domain.exceptions import BlockCreationError, NotFoundError, UnauthorizedAccessError
from domain.models import Block, SessionScheduleEntry, Variant, VariantItem
from domain.plan_tree import PlanTree
from domain.services import ItemOrderChange
from infrastructure import SupabaseBlockRepository, SupabasePlanSnapshotRepository

# All tests in this module are pure logic tests with mocks - mark as unit
pytestmark = pytest.mark.unit


def _query(rows: List[Dict[str, Any]]) -> MagicMock:
    """A query builder whose chained calls all return itself."""
    query = MagicMock()
    for method in ("select", "eq", "in_", "order", "limit", "insert", "update", "delete"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=rows)
    return query


def _client(tables: Dict[str, List[Dict[str, Any]]], rpc_data: Any = True) -> MagicMock:
    queries = {name: _query(rows) for name, rows in tables.items()}
    client = MagicMock()
    client.table.side_effect = lambda name: queries.setdefault(name, _query([]))
    client.rpc.return_value.execute.return_value = MagicMock(data=rpc_data)
    client.queries = queries
    return client


WORKOUT_TABLES = {
    "workouts": [{"id": "w1", "title": "Upper"}],
    "workout_plan_items": [
        {"id": "p1", "workout_id": "w1", "item_type": "exercise", "item_id": "e1", "sort_order": 0},
        {"id": "p2", "workout_id": "w1", "item_type": "block", "item_id": "b1", "sort_order": 1},
        {"id": "p3", "workout_id": "w1", "item_type": "info", "item_id": None,
         "content": "Stretch", "sort_order": 2},
    ],
    "blocks": [{"id": "b1", "name": "Circuit"}],
    "block_variants": [{"id": "v1", "block_id": "b1", "variant_label": "A", "sort_order": 0}],
    "block_items": [
        {"id": "i1", "variant_id": "v1", "exercise_id": "x1", "protocol_id": "pr1", "sort_order": 0},
    ],
    "session_schedules": [],
    "exercises": [{"id": "e1", "title": "Press"}, {"id": "x1", "title": "Row"}],
    "protocols": [{"id": "pr1", "name": "3x10", "sets": 3, "repetitions": 10}],
}


class TestPlanSnapshotRepository:

    def test_snapshot_assembled_from_tables(self):
        client = _client(WORKOUT_TABLES)
        repo = SupabasePlanSnapshotRepository(client)

        snapshot = repo.get_snapshot("w1", "user-1")

        tree = PlanTree.load(snapshot)
        assert [i.id for i in tree.ordered_plan_items()] == ["p1", "p2", "p3"]
        assert tree.active_variant("b1").id == "v1"
        assert tree.exercise("x1").title == "Row"
        client.rpc.assert_called_once_with(
            "can_profile_access_workout", {"workout_id_param": "w1", "user_id_param": "user-1"}
        )

    def test_ids_collected_for_reference_lookups(self):
        client = _client(WORKOUT_TABLES)
        SupabasePlanSnapshotRepository(client).get_snapshot("w1", "user-1")

        client.queries["blocks"].in_.assert_called_once_with("id", ["b1"])
        client.queries["block_items"].in_.assert_called_once_with("variant_id", ["v1"])
        client.queries["exercises"].in_.assert_called_once_with("id", ["e1", "x1"])

    def test_missing_workout_raises_not_found(self):
        client = _client({"workouts": []})

        with pytest.raises(NotFoundError):
            SupabasePlanSnapshotRepository(client).get_snapshot("w1", "user-1")

    def test_denied_access_raises(self):
        client = _client(WORKOUT_TABLES, rpc_data=False)

        with pytest.raises(UnauthorizedAccessError):
            SupabasePlanSnapshotRepository(client).get_snapshot("w1", "user-1")

    def test_access_decided_per_profile(self):
        client = _client(WORKOUT_TABLES)
        entitled = {("w1", "athlete-1")}

        def access(name, params):
            allowed = (params["workout_id_param"], params["user_id_param"]) in entitled
            return MagicMock(execute=MagicMock(return_value=MagicMock(data=allowed)))

        client.rpc.side_effect = access
        repo = SupabasePlanSnapshotRepository(client)

        assert repo.get_snapshot("w1", "athlete-1").workout.id == "w1"
        with pytest.raises(UnauthorizedAccessError):
            repo.get_snapshot("w1", "stranger")

        profiles = [c.args[1]["user_id_param"] for c in client.rpc.call_args_list]
        assert profiles == ["athlete-1", "stranger"]

    def test_access_check_can_be_disabled(self):
        client = _client(WORKOUT_TABLES, rpc_data=False)

        snapshot = SupabasePlanSnapshotRepository(client, check_access=False).get_snapshot("w1", "u")

        assert snapshot.workout.id == "w1"
        client.rpc.assert_not_called()

    def test_workout_without_items_skips_lookups(self):
        client = _client({"workouts": [{"id": "w1", "title": "Empty"}], "workout_plan_items": []})

        snapshot = SupabasePlanSnapshotRepository(client).get_snapshot("w1", "user-1")

        assert snapshot.is_empty
        assert "blocks" not in client.queries

    def test_snapshot_for_plan_item_uses_owner_workout(self):
        tables = dict(WORKOUT_TABLES)
        client = _client(tables)
        # first workout_plan_items query is the owner lookup
        client.queries["workout_plan_items"].execute.side_effect = [
            MagicMock(data=[{"id": "p2", "workout_id": "w1"}]),
            MagicMock(data=WORKOUT_TABLES["workout_plan_items"]),
        ]

        snapshot = SupabasePlanSnapshotRepository(client).get_snapshot_for_plan_item("p2", "user-1")

        assert snapshot.workout.id == "w1"

    def test_store_errors_propagate(self):
        client = MagicMock()
        client.table.side_effect = RuntimeError("network down")

        with pytest.raises(RuntimeError):
            SupabasePlanSnapshotRepository(client).get_snapshot("w1", "user-1")


class TestBlockRepository:

    def test_atomic_creation_uses_rpc(self):
        client = _client({}, rpc_data={"id": "b1"})
        repo = SupabaseBlockRepository(client)
        block = Block(id="b1", name="Circuit", rounds=2, coach_id="coach-1")
        variant = Variant(id="v1", block_id="b1", variant_label="A", name="Variant A", sort_order=0)

        assert repo.create_block_with_default_variant(block, variant) == block

        name, params = client.rpc.call_args.args
        assert name == "create_block_with_default_variant"
        assert json.loads(params["p_block"])["rounds"] == 2
        assert json.loads(params["p_block"])["coach_id"] == "coach-1"
        assert json.loads(params["p_variant"])["variant_label"] == "A"

    def test_atomic_creation_failure_wrapped(self):
        client = MagicMock()
        client.rpc.side_effect = RuntimeError("deadlock")

        with pytest.raises(BlockCreationError, match="deadlock"):
            SupabaseBlockRepository(client).create_block_with_default_variant(
                Block(id="b1", name="x"),
                Variant(id="v1", block_id="b1", variant_label="A", sort_order=0),
            )

    def test_atomic_creation_without_data_fails(self):
        client = _client({}, rpc_data=None)

        with pytest.raises(BlockCreationError, match="no data"):
            SupabaseBlockRepository(client).create_block_with_default_variant(
                Block(id="b1", name="x"),
                Variant(id="v1", block_id="b1", variant_label="A", sort_order=0),
            )

    def test_get_block_missing_returns_none(self):
        assert SupabaseBlockRepository(_client({"blocks": []})).get_block("b1") is None

    def test_list_variants(self):
        client = _client({"block_variants": WORKOUT_TABLES["block_variants"]})

        variants = SupabaseBlockRepository(client).list_variants("b1")

        assert [v.variant_label for v in variants] == ["A"]
        client.queries["block_variants"].order.assert_called_once_with("sort_order")

    def test_insert_variant_with_items(self):
        row = {"id": "v2", "block_id": "b1", "variant_label": "B", "sort_order": 1}
        client = _client({"block_variants": [row], "block_items": []})
        item = VariantItem(id="i9", variant_id="v2", exercise_id="x1", protocol_id="pr1", sort_order=0)

        stored = SupabaseBlockRepository(client).insert_variant(
            Variant(id="v2", block_id="b1", variant_label="B", sort_order=1), [item]
        )

        assert stored.variant_label == "B"
        inserted = client.queries["block_items"].insert.call_args.args[0]
        assert inserted[0]["variant_id"] == "v2"

    def test_insert_variant_item_failure_removes_variant(self):
        row = {"id": "v2", "block_id": "b1", "variant_label": "B", "sort_order": 1}
        client = _client({"block_variants": [row], "block_items": []})
        client.queries["block_items"].execute.side_effect = RuntimeError("fk violation")
        item = VariantItem(id="i9", variant_id="v2", exercise_id="x1", protocol_id="pr1", sort_order=0)

        with pytest.raises(RuntimeError):
            SupabaseBlockRepository(client).insert_variant(
                Variant(id="v2", block_id="b1", variant_label="B", sort_order=1), [item]
            )

        client.queries["block_variants"].delete.assert_called_once()

    def test_delete_variant_reports_missing(self):
        assert SupabaseBlockRepository(_client({"block_variants": []})).delete_variant("v9") is False

    def test_update_item_orders(self):
        client = _client({"block_items": []})

        SupabaseBlockRepository(client).update_item_orders(
            [ItemOrderChange(id="i1", sort_order=0), ItemOrderChange(id="i2", sort_order=1)]
        )

        query = client.queries["block_items"]
        query.in_.assert_called_once_with("id", ["i1", "i2"])
        assert query.update.call_count == 2

    def test_update_item_orders_restores_on_failure(self):
        client = _client({"block_items": []})
        query = client.queries["block_items"]
        current = MagicMock(data=[{"id": "i1", "sort_order": 0}, {"id": "i2", "sort_order": 1}])
        query.execute.side_effect = [current, MagicMock(data=[]), RuntimeError("timeout"), MagicMock(data=[])]

        with pytest.raises(RuntimeError, match="timeout"):
            SupabaseBlockRepository(client).update_item_orders(
                [ItemOrderChange(id="i1", sort_order=1), ItemOrderChange(id="i2", sort_order=0)]
            )

        updates = [c.args[0] for c in query.update.call_args_list]
        assert updates == [{"sort_order": 1}, {"sort_order": 0}, {"sort_order": 0}]
        assert query.eq.call_args_list[-1].args == ("id", "i1")

    def test_update_item_orders_without_changes(self):
        client = _client({"block_items": []})

        SupabaseBlockRepository(client).update_item_orders([])

        client.table.assert_not_called()

    def test_insert_item(self):
        row = {"id": "i9", "variant_id": "v1", "exercise_id": "x2", "protocol_id": "pr1", "sort_order": 3}
        client = _client({"block_items": [row]})

        stored = SupabaseBlockRepository(client).insert_item(
            VariantItem(id="i9", variant_id="v1", exercise_id="x2", protocol_id="pr1", sort_order=3)
        )

        assert stored.sort_order == 3
        assert client.queries["block_items"].insert.call_args.args[0]["exercise_id"] == "x2"

    def test_insert_item_without_data_fails(self):
        client = _client({"block_items": []})

        with pytest.raises(RuntimeError, match="no data"):
            SupabaseBlockRepository(client).insert_item(
                VariantItem(id="i9", variant_id="v1", exercise_id="x2", protocol_id="pr1", sort_order=0)
            )

    def test_delete_item(self):
        client = _client({"block_items": [{"id": "i1"}]})

        assert SupabaseBlockRepository(client).delete_item("i1") is True
        client.queries["block_items"].eq.assert_called_once_with("id", "i1")

    def test_delete_item_reports_missing(self):
        assert SupabaseBlockRepository(_client({"block_items": []})).delete_item("i9") is False

    def test_replace_schedule_deletes_then_inserts(self):
        rows = [{"block_id": "b1", "session_number": 1, "variant_label": "A"}]
        client = _client({"session_schedules": rows})

        stored = SupabaseBlockRepository(client).replace_schedule(
            "b1", [SessionScheduleEntry(block_id="b1", session_number=1, variant_label="A")]
        )

        query = client.queries["session_schedules"]
        query.delete.assert_called_once()
        query.insert.assert_called_once()
        assert stored[0].variant_label == "A"
