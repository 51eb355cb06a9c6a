"""
Navigation resolver for athlete-facing "start/continue workout".

Given a NavigationCursor and a loaded PlanTree, computes the current
position, the next and previous actionable positions, and the block
context. Resolution is stateless: previous/next are re-derived from
sort_order alone, so previous(next(P)) == P for every reachable position
away from the workout boundaries.

Rules:
- Exercise plan item: context is OUTSIDE
- Block plan item: context is INSIDE_BLOCK_VARIANT; the cursor's
  (exercise_id, protocol_id) pair is matched against the active variant,
  defaulting to its first item when no pair is given
- Next from the last item of a variant leaves the block: the next actionable
  plan item is entered (a block at its active variant's first item)
- Previous is the inverse; a block is entered at its last item
- Rest/info items are never navigation targets and are skipped
"""

import logging
from typing import Mapping, Optional, Tuple

from domain.exceptions import InvalidParametersError, StructureInconsistentError
from domain.models import (
    BlockContext,
    BlockContextItem,
    BlockPlanItem,
    ExercisePlanItem,
    NavigationContext,
    NavigationCursor,
    NavigationPosition,
    NavigationResult,
    NextBlock,
    PlanItem,
    PositionKind,
    Variant,
    VariantItem,
)
from domain.plan_tree import PlanTree

logger = logging.getLogger(__name__)


class NavigationResolver:
    """
    Resolves cursors against one PlanTree.

    Usage:
        >>> resolver = NavigationResolver(PlanTree.load(snapshot))
        >>> result = resolver.resolve(NavigationCursor(plan_item_id="p2"))
        >>> result.next.kind
        <PositionKind.BLOCK_ITEM: 'block_item'>
    """

    def __init__(self, tree: PlanTree):
        self._tree = tree

    @property
    def tree(self) -> PlanTree:
        return self._tree

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def resolve(self, cursor: NavigationCursor) -> NavigationResult:
        """
        Resolve a cursor into a full navigation result.

        Args:
            cursor: Caller-supplied position.

        Returns:
            NavigationResult. Status is EMPTY_WORKOUT when the workout has no
            plan items or none of them is actionable.

        Raises:
            NotFoundError: If the plan item is not part of the workout.
            InvalidParametersError: If the cursor names a position that does
                not exist in the active variant.
            StructureInconsistentError: If the active variant has no items.
        """
        tree = self._tree
        workout_id = tree.workout.id

        if tree.is_empty:
            return NavigationResult.empty(workout_id, cursor.program_id)

        plan_item = tree.plan_item(cursor.plan_item_id)

        if not tree.actionable_plan_items():
            logger.debug(f"Workout {workout_id} has no actionable plan items")
            return NavigationResult.empty(workout_id, cursor.program_id)

        if cursor.has_partial_pair:
            raise InvalidParametersError(
                "exercise_id and protocol_id must be supplied together"
            )

        index = self._index_of(plan_item)
        session = cursor.session_number
        pins = dict(cursor.variant_pins)

        if isinstance(plan_item, BlockPlanItem):
            return self._resolve_inside_block(plan_item, index, cursor)

        if isinstance(plan_item, ExercisePlanItem):
            current = self._exercise_position(plan_item)
        else:
            current = NavigationPosition(
                kind=PositionKind.DISPLAY, plan_item_id=plan_item.id
            )
        current = _with_pins(current, pins)

        next_position = self._first_position_after(index, session, pins)
        return NavigationResult(
            workout_id=workout_id,
            context=NavigationContext.OUTSIDE,
            current=current,
            next=next_position,
            previous=self._last_position_before(index, session, pins),
            exercise=tree.exercise(current.exercise_id) if current.exercise_id else None,
            next_block=self._next_block(plan_item, next_position),
            has_next_exercise=next_position.kind != PositionKind.WORKOUT_END,
            video_url=plan_item.video_url,
            show_video=plan_item.show_video,
            program_id=cursor.program_id,
        )

    def resolve_start(
        self,
        *,
        program_id: Optional[str] = None,
        session_number: Optional[int] = None,
    ) -> NavigationResult:
        """Resolve the first actionable position of the workout."""
        if not self._tree.actionable_plan_items():
            return NavigationResult.empty(self._tree.workout.id, program_id)

        first = self._first_position_after(-1, session_number, {})
        cursor = first.to_cursor(program_id=program_id, session_number=session_number)
        return self.resolve(cursor)

    def next_position(self, cursor: NavigationCursor) -> Optional[NavigationPosition]:
        """Shortcut for `resolve(cursor).next`."""
        return self.resolve(cursor).next

    def previous_position(self, cursor: NavigationCursor) -> Optional[NavigationPosition]:
        """Shortcut for `resolve(cursor).previous`."""
        return self.resolve(cursor).previous

    # -------------------------------------------------------------------------
    # Block resolution
    # -------------------------------------------------------------------------

    def _resolve_inside_block(
        self,
        plan_item: BlockPlanItem,
        index: int,
        cursor: NavigationCursor,
    ) -> NavigationResult:
        tree = self._tree
        session = cursor.session_number
        pins = dict(cursor.variant_pins)
        if cursor.variant_label is not None:
            pins[plan_item.id] = cursor.variant_label
        variant = self._active_variant_for_cursor(plan_item, session, pins)
        items = self._items_or_fail(variant)
        position_index = self._match_item(items, variant, cursor)
        item = items[position_index]

        current = _with_pins(self._block_position(plan_item, variant, item), pins)
        is_last = position_index == len(items) - 1

        if not is_last:
            next_position = _with_pins(
                self._block_position(plan_item, variant, items[position_index + 1]), pins
            )
        else:
            next_position = self._first_position_after(index, session, pins)

        if position_index > 0:
            previous = _with_pins(
                self._block_position(plan_item, variant, items[position_index - 1]), pins
            )
        else:
            previous = self._last_position_before(index, session, pins)

        block = tree.block(plan_item.block_id)
        block_context = BlockContext(
            block_id=block.id,
            block_name=block.name,
            rounds=block.rounds,
            variant_id=variant.id,
            variant_label=variant.variant_label,
            current_index=position_index,
            total_items=len(items),
            items=[self._context_item(i) for i in items],
        )

        logger.debug(
            f"Cursor at block {block.id} variant {variant.variant_label} "
            f"item {position_index + 1}/{len(items)}"
        )

        return NavigationResult(
            workout_id=tree.workout.id,
            context=NavigationContext.INSIDE_BLOCK_VARIANT,
            current=current,
            next=next_position,
            previous=previous,
            exercise=tree.exercise(item.exercise_id),
            protocol=tree.protocol(item.protocol_id),
            block_context=block_context,
            next_block=self._next_block(plan_item, next_position),
            has_next_exercise=next_position.kind != PositionKind.WORKOUT_END,
            is_last_exercise=is_last,
            video_url=plan_item.video_url,
            show_video=plan_item.show_video,
            program_id=cursor.program_id,
        )

    def _active_variant_for_cursor(
        self,
        plan_item: BlockPlanItem,
        session_number: Optional[int],
        pins: Mapping[str, str],
    ) -> Variant:
        """Pinned variant of a block plan item, else the scheduled one."""
        label = pins.get(plan_item.id)
        if label is None:
            return self._tree.active_variant(plan_item.block_id, session_number)

        variant = self._tree.variant_by_label(plan_item.block_id, label)
        if variant is None:
            logger.warning(
                f"Cursor pins variant {label} which block "
                f"{plan_item.block_id} does not have"
            )
            raise InvalidParametersError(
                f"Block '{plan_item.block_id}' has no variant '{label}'"
            )
        return variant

    def _match_item(
        self,
        items: Tuple[VariantItem, ...],
        variant: Variant,
        cursor: NavigationCursor,
    ) -> int:
        """Index of the cursor's item within the active variant."""
        if not cursor.has_pair and cursor.sort_order is None:
            return 0

        for index, item in enumerate(items):
            if cursor.has_pair and not item.matches(cursor.exercise_id, cursor.protocol_id):
                continue
            if cursor.sort_order is not None and item.sort_order != cursor.sort_order:
                continue
            return index

        logger.warning(
            f"Cursor ({cursor.exercise_id}, {cursor.protocol_id}, sort_order="
            f"{cursor.sort_order}) not found in variant {variant.id}"
        )
        raise InvalidParametersError(
            f"Position not found in variant '{variant.variant_label}' of block "
            f"'{variant.block_id}'"
        )

    # -------------------------------------------------------------------------
    # Neighbour search
    # -------------------------------------------------------------------------

    def _first_position_after(
        self, index: int, session_number: Optional[int], pins: Mapping[str, str]
    ) -> NavigationPosition:
        """Entry position of the next actionable plan item after `index`."""
        for plan_item in self._tree.ordered_plan_items()[index + 1:]:
            if isinstance(plan_item, ExercisePlanItem):
                return _with_pins(self._exercise_position(plan_item), pins)
            if isinstance(plan_item, BlockPlanItem):
                variant = self._active_variant_for_cursor(plan_item, session_number, pins)
                items = self._items_or_fail(variant)
                return _with_pins(self._block_position(plan_item, variant, items[0]), pins)
        return NavigationPosition.end()

    def _last_position_before(
        self, index: int, session_number: Optional[int], pins: Mapping[str, str]
    ) -> NavigationPosition:
        """Exit position of the previous actionable plan item before `index`."""
        for plan_item in reversed(self._tree.ordered_plan_items()[:max(index, 0)]):
            if isinstance(plan_item, ExercisePlanItem):
                return _with_pins(self._exercise_position(plan_item), pins)
            if isinstance(plan_item, BlockPlanItem):
                variant = self._active_variant_for_cursor(plan_item, session_number, pins)
                items = self._items_or_fail(variant)
                return _with_pins(self._block_position(plan_item, variant, items[-1]), pins)
        return NavigationPosition.start()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _index_of(self, plan_item: PlanItem) -> int:
        for index, item in enumerate(self._tree.ordered_plan_items()):
            if item.id == plan_item.id:
                return index
        raise ValueError(f"Plan item '{plan_item.id}' is not part of the tree")

    def _items_or_fail(self, variant: Variant) -> Tuple[VariantItem, ...]:
        items = self._tree.items_of(variant.id)
        if not items:
            raise StructureInconsistentError(
                f"Active variant '{variant.variant_label}' of block "
                f"'{variant.block_id}' has no items"
            )
        return items

    @staticmethod
    def _exercise_position(plan_item: ExercisePlanItem) -> NavigationPosition:
        return NavigationPosition(
            kind=PositionKind.EXERCISE,
            plan_item_id=plan_item.id,
            exercise_id=plan_item.exercise_id,
        )

    @staticmethod
    def _block_position(
        plan_item: BlockPlanItem, variant: Variant, item: VariantItem
    ) -> NavigationPosition:
        return NavigationPosition(
            kind=PositionKind.BLOCK_ITEM,
            plan_item_id=plan_item.id,
            exercise_id=item.exercise_id,
            protocol_id=item.protocol_id,
            block_id=plan_item.block_id,
            variant_id=variant.id,
            variant_label=variant.variant_label,
            sort_order=item.sort_order,
        )

    def _context_item(self, item: VariantItem) -> BlockContextItem:
        exercise = self._tree.exercise(item.exercise_id)
        protocol = self._tree.protocol(item.protocol_id)
        return BlockContextItem(
            sort_order=item.sort_order,
            exercise_id=item.exercise_id,
            protocol_id=item.protocol_id,
            exercise_title=exercise.title if exercise else None,
            protocol_name=protocol.name if protocol else None,
        )

    def _next_block(
        self, current_item: PlanItem, next_position: NavigationPosition
    ) -> Optional[NextBlock]:
        """Describe the block entered by the next step, if it is a new one."""
        if next_position.kind != PositionKind.BLOCK_ITEM:
            return None
        if next_position.plan_item_id == current_item.id:
            return None
        block = self._tree.block(next_position.block_id)
        return NextBlock(
            plan_item_id=next_position.plan_item_id,
            block_id=block.id,
            block_name=block.name,
            variant_label=next_position.variant_label,
            first_exercise=next_position,
        )


def _with_pins(position: NavigationPosition, pins: Mapping[str, str]) -> NavigationPosition:
    if not pins or position.is_boundary:
        return position
    return position.model_copy(update={"variant_pins": dict(pins)})
