"""
Unit tests for NavigationResolver.

Covers block entry/exit, skipping of rest/info items, the workout
boundaries, active variant selection and the previous/next round trip.
"""

import pytest

from domain.exceptions import ErrorCode, InvalidParametersError, NotFoundError
from domain.models import (
    NavigationContext,
    NavigationCursor,
    NavigationStatus,
    PositionKind,
)
from domain.plan_tree import PlanTree
from domain.services import NavigationResolver
from tests.fakes import (
    SnapshotBuilder,
    circuit_workout,
    empty_workout,
    rest_only_workout,
    two_variant_workout,
)


def _resolver(snapshot) -> NavigationResolver:
    return NavigationResolver(PlanTree.load(snapshot))


def _walk_forward(resolver: NavigationResolver, session_number=None):
    """Every reachable position from the start, in order."""
    result = resolver.resolve_start(session_number=session_number)
    positions = [result.current]
    while result.next.kind != PositionKind.WORKOUT_END:
        result = resolver.resolve(result.next.to_cursor(session_number=session_number))
        positions.append(result.current)
    return positions


# =============================================================================
# Circuit workout: E1, B1 (A: X1, X2), E2
# =============================================================================


@pytest.mark.unit
class TestCircuitWorkout:

    def test_next_inside_block_stays_in_variant(self):
        result = _resolver(circuit_workout()).resolve(
            NavigationCursor(plan_item_id="p-b1", exercise_id="x1", protocol_id="pr1")
        )
        assert result.context == NavigationContext.INSIDE_BLOCK_VARIANT
        assert result.current.exercise_id == "x1"
        assert result.next.kind == PositionKind.BLOCK_ITEM
        assert result.next.plan_item_id == "p-b1"
        assert (result.next.exercise_id, result.next.protocol_id) == ("x2", "pr2")
        assert result.is_last_exercise is False
        assert result.next_block is None

    def test_next_from_last_block_item_leaves_block(self):
        result = _resolver(circuit_workout()).resolve(
            NavigationCursor(plan_item_id="p-b1", exercise_id="x2", protocol_id="pr2")
        )
        assert result.is_last_exercise is True
        assert result.next.kind == PositionKind.EXERCISE
        assert result.next.plan_item_id == "p-e2"
        assert result.next.exercise_id == "e2"
        assert result.has_next_exercise is True

    def test_last_exercise_of_workout_reaches_end(self):
        result = _resolver(circuit_workout()).resolve(NavigationCursor(plan_item_id="p-e2"))
        assert result.context == NavigationContext.OUTSIDE
        assert result.next.kind == PositionKind.WORKOUT_END
        assert result.is_end_of_workout
        assert result.has_next_exercise is False
        assert result.next.to_cursor() is None

    def test_first_exercise_has_start_as_previous(self):
        result = _resolver(circuit_workout()).resolve(NavigationCursor(plan_item_id="p-e1"))
        assert result.previous.kind == PositionKind.WORKOUT_START
        assert result.exercise.title == "Exercise e1"

    def test_next_block_described_when_entering_block(self):
        result = _resolver(circuit_workout()).resolve(NavigationCursor(plan_item_id="p-e1"))
        assert result.next.kind == PositionKind.BLOCK_ITEM
        assert result.next_block is not None
        assert result.next_block.block_name == "Circuit"
        assert result.next_block.variant_label == "A"
        assert result.next_block.first_exercise.exercise_id == "x1"

    def test_block_without_pair_starts_at_first_item(self):
        result = _resolver(circuit_workout()).resolve(NavigationCursor(plan_item_id="p-b1"))
        assert result.current.exercise_id == "x1"
        assert result.previous.plan_item_id == "p-e1"

    def test_block_context_payload(self):
        result = _resolver(circuit_workout()).resolve(
            NavigationCursor(plan_item_id="p-b1", exercise_id="x2", protocol_id="pr2")
        )
        context = result.block_context
        assert context.block_id == "b1"
        assert context.variant_label == "A"
        assert context.current_index == 1
        assert context.total_items == 2
        assert [item.exercise_title for item in context.items] == ["Exercise x1", "Exercise x2"]
        assert result.protocol.name == "Protocol pr2"

    def test_previous_from_first_block_item_is_bare_exercise(self):
        result = _resolver(circuit_workout()).resolve(
            NavigationCursor(plan_item_id="p-b1", exercise_id="x1", protocol_id="pr1")
        )
        assert result.previous.kind == PositionKind.EXERCISE
        assert result.previous.plan_item_id == "p-e1"

    def test_start_lands_on_first_actionable_item(self):
        result = _resolver(circuit_workout()).resolve_start(program_id="prog-1")
        assert result.current.plan_item_id == "p-e1"
        assert result.program_id == "prog-1"

    def test_exercise_item_ignores_pair(self):
        result = _resolver(circuit_workout()).resolve(
            NavigationCursor(plan_item_id="p-e1", exercise_id="zz", protocol_id="zz")
        )
        assert result.current.exercise_id == "e1"


# =============================================================================
# Rest/info skipping and variants
# =============================================================================


@pytest.mark.unit
class TestVariantWorkout:

    def test_start_skips_leading_info(self):
        result = _resolver(two_variant_workout()).resolve_start()
        assert result.current.plan_item_id == "p-e1"

    def test_next_skips_rest_items(self):
        result = _resolver(two_variant_workout()).resolve(NavigationCursor(plan_item_id="p-e1"))
        assert result.next.plan_item_id == "p-b1"
        assert result.next.exercise_id == "x1"

    def test_leaving_block_skips_rest_into_next_block(self):
        result = _resolver(two_variant_workout()).resolve(
            NavigationCursor(plan_item_id="p-b1", exercise_id="x2", protocol_id="pr2")
        )
        assert result.next.plan_item_id == "p-b2"
        assert result.next.exercise_id == "z1"
        assert result.next_block.block_id == "b2"

    def test_previous_enters_block_at_last_item(self):
        result = _resolver(two_variant_workout()).resolve(NavigationCursor(plan_item_id="p-b2"))
        assert result.previous.plan_item_id == "p-b1"
        assert result.previous.exercise_id == "x2"

    def test_cursor_on_rest_item_is_display_only(self):
        result = _resolver(two_variant_workout()).resolve(NavigationCursor(plan_item_id="p-rest1"))
        assert result.context == NavigationContext.OUTSIDE
        assert result.current.kind == PositionKind.DISPLAY
        assert result.previous.plan_item_id == "p-e1"
        assert result.next.plan_item_id == "p-b1"

    def test_cursor_on_info_item_before_everything(self):
        result = _resolver(two_variant_workout()).resolve(NavigationCursor(plan_item_id="p-info"))
        assert result.previous.kind == PositionKind.WORKOUT_START
        assert result.next.plan_item_id == "p-e1"

    def test_session_schedule_selects_variant(self):
        result = _resolver(two_variant_workout()).resolve(
            NavigationCursor(plan_item_id="p-b1", session_number=2)
        )
        assert result.block_context.variant_label == "B"
        assert result.current.exercise_id == "y1"
        assert result.is_last_exercise is True
        assert result.block_context.rounds == 3

    def test_explicit_label_overrides_schedule(self):
        result = _resolver(two_variant_workout()).resolve(
            NavigationCursor(plan_item_id="p-b1", session_number=2, variant_label="A")
        )
        assert result.block_context.variant_label == "A"

    def test_previous_uses_scheduled_variant(self):
        result = _resolver(two_variant_workout()).resolve(
            NavigationCursor(plan_item_id="p-b2", session_number=2)
        )
        assert result.previous.variant_label == "B"
        assert result.previous.exercise_id == "y1"

    def test_unknown_label_is_invalid(self):
        with pytest.raises(InvalidParametersError):
            _resolver(two_variant_workout()).resolve(
                NavigationCursor(plan_item_id="p-b1", variant_label="C")
            )

    def test_pair_not_in_active_variant_is_invalid(self):
        # y1 only exists in variant B; A is active
        with pytest.raises(InvalidParametersError) as exc_info:
            _resolver(two_variant_workout()).resolve(
                NavigationCursor(plan_item_id="p-b1", exercise_id="y1", protocol_id="pr1")
            )
        assert exc_info.value.code == ErrorCode.INVALID_PARAMETERS

    def test_partial_pair_is_invalid(self):
        with pytest.raises(InvalidParametersError):
            _resolver(two_variant_workout()).resolve(
                NavigationCursor(plan_item_id="p-b1", exercise_id="x1")
            )

    def test_unknown_plan_item_not_found(self):
        with pytest.raises(NotFoundError):
            _resolver(two_variant_workout()).resolve(NavigationCursor(plan_item_id="nope"))


# =============================================================================
# Empty workouts
# =============================================================================


@pytest.mark.unit
class TestEmptyWorkouts:

    def test_rest_only_workout_is_empty_for_navigation(self):
        result = _resolver(rest_only_workout()).resolve(NavigationCursor(plan_item_id="p-rest"))
        assert result.status == NavigationStatus.EMPTY_WORKOUT
        assert result.is_empty
        assert result.current is None

    def test_rest_only_workout_start_is_empty(self):
        assert _resolver(rest_only_workout()).resolve_start().is_empty

    def test_workout_without_items_is_empty(self):
        result = _resolver(empty_workout()).resolve_start()
        assert result.status == NavigationStatus.EMPTY_WORKOUT
        assert result.workout_id == "w4"


# =============================================================================
# Round trip
# =============================================================================


@pytest.mark.unit
class TestRoundTrip:
    """previous(next(P)) == P for every reachable position."""

    @pytest.mark.parametrize("session_number", [None, 1, 2])
    def test_round_trip_over_whole_workout(self, session_number):
        resolver = _resolver(two_variant_workout())
        positions = _walk_forward(resolver, session_number)
        assert len(positions) >= 4

        for position in positions:
            result = resolver.resolve(position.to_cursor(session_number=session_number))
            assert result.current == position
            if result.next.kind == PositionKind.WORKOUT_END:
                continue
            following = resolver.resolve(result.next.to_cursor(session_number=session_number))
            assert following.previous == position

    def test_round_trip_out_of_pinned_variant(self):
        snapshot = (
            SnapshotBuilder()
            .block("p1", "b1", variants={"A": [("x1", "pr1")], "B": [("y1", "pr1"), ("y2", "pr1")]})
            .exercise("p2", "e2")
            .build()
        )
        resolver = _resolver(snapshot)
        pinned = resolver.resolve(
            NavigationCursor(plan_item_id="p1", exercise_id="y2", protocol_id="pr1", variant_label="B")
        )
        assert pinned.next.plan_item_id == "p2"
        assert pinned.next.variant_pins == {"p1": "B"}

        back = resolver.resolve(pinned.next.to_cursor())

        assert back.previous == pinned.current
        assert (back.previous.variant_label, back.previous.exercise_id) == ("B", "y2")

    def test_pinned_variant_survives_walk(self):
        resolver = _resolver(two_variant_workout())
        result = resolver.resolve(NavigationCursor(plan_item_id="p-b1", variant_label="B"))
        positions = [result.current]
        while result.next.kind != PositionKind.WORKOUT_END:
            result = resolver.resolve(result.next.to_cursor())
            positions.append(result.current)

        assert [p.exercise_id for p in positions] == ["y1", "z1", "z2", "z3", "e2"]
        entered_back = resolver.resolve(positions[1].to_cursor()).previous
        assert entered_back == positions[0]
        assert (entered_back.variant_label, entered_back.exercise_id) == ("B", "y1")

    def test_unknown_pin_is_invalid(self):
        with pytest.raises(InvalidParametersError):
            _resolver(two_variant_workout()).resolve(
                NavigationCursor(plan_item_id="p-e2", variant_pins={"p-b2": "C"})
            )

    def test_walk_visits_every_item_once(self):
        positions = _walk_forward(_resolver(two_variant_workout()))
        assert [p.exercise_id for p in positions] == ["e1", "x1", "x2", "z1", "z2", "z3", "e2"]

    def test_repeated_pair_disambiguated_by_sort_order(self):
        snapshot = (
            SnapshotBuilder()
            .block("p1", "b1", variants={"A": [("x1", "pr1"), ("x2", "pr1"), ("x1", "pr1")]})
            .build()
        )
        resolver = _resolver(snapshot)
        positions = _walk_forward(resolver)
        assert [p.sort_order for p in positions] == [0, 1, 2]

        result = resolver.resolve(positions[2].to_cursor())
        assert result.block_context.current_index == 2
        assert result.is_end_of_workout
