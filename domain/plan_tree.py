"""
PlanTree: a validated, read-only view of one workout snapshot.

All structural invariants are checked once in `PlanTree.load()`:

1. Plan item sort_order values are unique within the workout
2. Every block has at least one variant
3. Every variant has at least one item
4. Variant sort_order and variant_label are unique within a block
5. Variant item sort_order is unique within a variant
6. Every reference (plan item -> block, variant -> block, item -> variant)
   resolves inside the snapshot

Violations are collected and raised together as a StructureInconsistentError.
They are never repaired. After loading, traversal is pure: every accessor
returns tuples built at load time.
"""

import logging
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from domain.exceptions import NotFoundError, StructureInconsistentError
from domain.models import (
    Block,
    BlockPlanItem,
    ExerciseRef,
    PlanItem,
    ProtocolRef,
    Variant,
    VariantItem,
    Workout,
    WorkoutSnapshot,
)

logger = logging.getLogger(__name__)


def _duplicates(values: Iterable) -> List:
    """Return values that occur more than once, in first-seen order."""
    counts = Counter(values)
    return [value for value, count in counts.items() if count > 1]


class PlanTree:
    """
    Immutable structure of one workout.

    Build with `PlanTree.load(snapshot)`; the constructor assumes the
    snapshot has already been validated.
    """

    def __init__(
        self,
        workout: Workout,
        plan_items: Tuple[PlanItem, ...],
        blocks: Dict[str, Block],
        variants_by_block: Dict[str, Tuple[Variant, ...]],
        items_by_variant: Dict[str, Tuple[VariantItem, ...]],
        exercises: Dict[str, ExerciseRef],
        protocols: Dict[str, ProtocolRef],
        schedules: Dict[Tuple[str, int], str],
    ):
        self._workout = workout
        self._plan_items = plan_items
        self._plan_items_by_id = {item.id: item for item in plan_items}
        self._blocks = blocks
        self._variants_by_block = variants_by_block
        self._variants_by_id = {
            variant.id: variant
            for variants in variants_by_block.values()
            for variant in variants
        }
        self._items_by_variant = items_by_variant
        self._exercises = exercises
        self._protocols = protocols
        self._schedules = schedules
        self._actionable = tuple(item for item in plan_items if item.is_actionable)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, snapshot: WorkoutSnapshot) -> "PlanTree":
        """
        Validate a snapshot and build the tree.

        Args:
            snapshot: Point-in-time structure of one workout.

        Returns:
            PlanTree over the snapshot.

        Raises:
            StructureInconsistentError: If any structural invariant is violated.
        """
        errors: List[str] = []
        workout_id = snapshot.workout.id

        # Plan items
        for dup in _duplicates(item.id for item in snapshot.plan_items):
            errors.append(f"Duplicate plan item id '{dup}'")
        for dup in _duplicates(item.sort_order for item in snapshot.plan_items):
            errors.append(f"Duplicate plan item sort_order {dup} in workout '{workout_id}'")
        for item in snapshot.plan_items:
            if item.workout_id != workout_id:
                errors.append(
                    f"Plan item '{item.id}' belongs to workout '{item.workout_id}', "
                    f"not '{workout_id}'"
                )

        # Blocks
        for dup in _duplicates(block.id for block in snapshot.blocks):
            errors.append(f"Duplicate block id '{dup}'")
        blocks = {block.id: block for block in snapshot.blocks}
        for item in snapshot.plan_items:
            if isinstance(item, BlockPlanItem) and item.block_id not in blocks:
                errors.append(f"Plan item '{item.id}' references missing block '{item.block_id}'")

        # Variants
        for dup in _duplicates(variant.id for variant in snapshot.variants):
            errors.append(f"Duplicate variant id '{dup}'")
        grouped_variants: Dict[str, List[Variant]] = defaultdict(list)
        for variant in snapshot.variants:
            if variant.block_id not in blocks:
                errors.append(f"Variant '{variant.id}' references missing block '{variant.block_id}'")
                continue
            grouped_variants[variant.block_id].append(variant)

        for block_id in blocks:
            block_variants = grouped_variants.get(block_id, [])
            if not block_variants:
                errors.append(f"Block '{block_id}' has no variants")
                continue
            for dup in _duplicates(v.sort_order for v in block_variants):
                errors.append(f"Duplicate variant sort_order {dup} in block '{block_id}'")
            for dup in _duplicates(v.variant_label for v in block_variants):
                errors.append(f"Duplicate variant label '{dup}' in block '{block_id}'")

        # Variant items
        for dup in _duplicates(item.id for item in snapshot.variant_items):
            errors.append(f"Duplicate variant item id '{dup}'")
        variant_ids = {variant.id for variant in snapshot.variants}
        grouped_items: Dict[str, List[VariantItem]] = defaultdict(list)
        for vitem in snapshot.variant_items:
            if vitem.variant_id not in variant_ids:
                errors.append(
                    f"Variant item '{vitem.id}' references missing variant '{vitem.variant_id}'"
                )
                continue
            grouped_items[vitem.variant_id].append(vitem)

        for variant in snapshot.variants:
            variant_items = grouped_items.get(variant.id, [])
            if not variant_items:
                errors.append(
                    f"Variant '{variant.variant_label}' ({variant.id}) of block "
                    f"'{variant.block_id}' has no items"
                )
                continue
            for dup in _duplicates(i.sort_order for i in variant_items):
                errors.append(f"Duplicate item sort_order {dup} in variant '{variant.id}'")

        if errors:
            logger.warning(
                f"Snapshot for workout {workout_id} is inconsistent: {len(errors)} issue(s)"
            )
            raise StructureInconsistentError(
                f"Workout '{workout_id}' structure is inconsistent", errors=errors
            )

        schedules: Dict[Tuple[str, int], str] = {}
        for entry in snapshot.session_schedules:
            schedules[(entry.block_id, entry.session_number)] = entry.variant_label

        return cls(
            workout=snapshot.workout,
            plan_items=tuple(sorted(snapshot.plan_items, key=lambda i: i.sort_order)),
            blocks=blocks,
            variants_by_block={
                block_id: tuple(sorted(variants, key=lambda v: v.sort_order))
                for block_id, variants in grouped_variants.items()
            },
            items_by_variant={
                variant_id: tuple(sorted(items, key=lambda i: i.sort_order))
                for variant_id, items in grouped_items.items()
            },
            exercises={ex.id: ex for ex in snapshot.exercises},
            protocols={pr.id: pr for pr in snapshot.protocols},
            schedules=schedules,
        )

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    @property
    def workout(self) -> Workout:
        return self._workout

    @property
    def is_empty(self) -> bool:
        """Check if the workout has no plan items."""
        return not self._plan_items

    def ordered_plan_items(self) -> Tuple[PlanItem, ...]:
        """All plan items, ascending by sort_order (rest/info included)."""
        return self._plan_items

    def actionable_plan_items(self) -> Tuple[PlanItem, ...]:
        """Exercise and block plan items, ascending by sort_order."""
        return self._actionable

    def plan_item(self, plan_item_id: str) -> PlanItem:
        """
        Get a plan item by id.

        Raises:
            NotFoundError: If the plan item is not part of this workout.
        """
        item = self._plan_items_by_id.get(plan_item_id)
        if item is None:
            raise NotFoundError(
                f"Plan item '{plan_item_id}' not found in workout '{self._workout.id}'"
            )
        return item

    def block(self, block_id: str) -> Block:
        block = self._blocks.get(block_id)
        if block is None:
            raise NotFoundError(f"Block '{block_id}' not found")
        return block

    def variants_of(self, block_id: str) -> Tuple[Variant, ...]:
        """Variants of a block, ascending by sort_order."""
        if block_id not in self._blocks:
            raise NotFoundError(f"Block '{block_id}' not found")
        return self._variants_by_block.get(block_id, ())

    def variant(self, variant_id: str) -> Variant:
        variant = self._variants_by_id.get(variant_id)
        if variant is None:
            raise NotFoundError(f"Variant '{variant_id}' not found")
        return variant

    def variant_by_label(self, block_id: str, label: str) -> Optional[Variant]:
        for variant in self.variants_of(block_id):
            if variant.variant_label == label:
                return variant
        return None

    def items_of(self, variant_id: str) -> Tuple[VariantItem, ...]:
        """Items of a variant, ascending by sort_order."""
        if variant_id not in self._variants_by_id:
            raise NotFoundError(f"Variant '{variant_id}' not found")
        return self._items_by_variant.get(variant_id, ())

    def active_variant(self, block_id: str, session_number: Optional[int] = None) -> Variant:
        """
        Resolve the active variant of a block.

        The session schedule entry for `session_number` wins when it names an
        existing label; otherwise the first variant by sort_order is active.

        Raises:
            StructureInconsistentError: If the block has no variants.
        """
        variants = self.variants_of(block_id)
        if not variants:
            raise StructureInconsistentError(f"Block '{block_id}' has no variants")

        if session_number is not None:
            label = self._schedules.get((block_id, session_number))
            if label is not None:
                scheduled = self.variant_by_label(block_id, label)
                if scheduled is not None:
                    return scheduled
                logger.debug(
                    f"Schedule for block {block_id} session {session_number} names "
                    f"unknown variant {label}; using first variant"
                )
        return variants[0]

    def exercise(self, exercise_id: str) -> Optional[ExerciseRef]:
        return self._exercises.get(exercise_id)

    def protocol(self, protocol_id: str) -> Optional[ProtocolRef]:
        return self._protocols.get(protocol_id)

    def __len__(self) -> int:
        return len(self._plan_items)

    def __repr__(self) -> str:
        return (
            f"PlanTree(workout={self._workout.id!r}, plan_items={len(self._plan_items)}, "
            f"blocks={len(self._blocks)})"
        )
