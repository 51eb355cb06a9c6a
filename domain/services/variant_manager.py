"""
Variant manager: structural rules for editing a block's variants.

Every function here is pure. It computes the legal resulting state of a
mutation (and the compensating changes, such as a new active label) without
performing it; the block repository persists the plan.

Invariants enforced:
- A block always keeps at least one variant (deleting the sole variant is refused)
- Labels are assigned by current variant count: A, B, C, ... (then AA, AB, ...)
- Labels are unique within a block at any instant
- Deleting the active variant selects the first remaining variant by sort_order
- A variant keeps at least one item once it has been filled (removing the
  last item is refused); new items are appended after the current last one

Refusals are reported, never silently corrected.
"""

import logging
import uuid
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from domain.exceptions import InvalidParametersError, NotFoundError
from domain.models import Block, SessionScheduleEntry, Variant, VariantItem

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]
Pair = Tuple[str, str]

DEFAULT_VARIANT_LABEL = "A"


def _new_id() -> str:
    return str(uuid.uuid4())


def label_for_index(index: int) -> str:
    """
    Spreadsheet-style label for a zero-based index.

    Examples:
        >>> label_for_index(0), label_for_index(25), label_for_index(26)
        ('A', 'Z', 'AA')
    """
    if index < 0:
        raise ValueError("Label index must be non-negative")
    label = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        label = chr(65 + remainder) + label
    return label


def default_variant_name(label: str) -> str:
    return f"Variant {label}"


# =============================================================================
# Plans
# =============================================================================


class VariantCreationPlan(BaseModel):
    """A new variant to insert into a block, with optional initial items."""

    variant: Variant
    items: List[VariantItem] = Field(default_factory=list)

    model_config = {"frozen": True}


class BlockCreationPlan(BaseModel):
    """A new block together with its default variant A."""

    block: Block
    default_variant: Variant

    model_config = {"frozen": True}


class VariantDeletionPlan(BaseModel):
    """Outcome of a deletion request."""

    allowed: bool
    variant_id: str
    deleted_label: Optional[str] = None
    reason: Optional[str] = None
    new_active_label: Optional[str] = None
    active_changed: bool = False
    orphaned_sessions: List[int] = Field(
        default_factory=list,
        description="Session numbers whose schedule entry named the deleted label",
    )

    model_config = {"frozen": True}


class VariantDuplicationPlan(BaseModel):
    """A deep copy of a variant under the next label."""

    source_variant_id: str
    variant: Variant
    items: List[VariantItem]

    model_config = {"frozen": True}


class VariantRenamePlan(BaseModel):
    """Display-only changes to a variant. The label is never touched."""

    variant_id: str
    changes: Dict[str, Optional[str]]

    model_config = {"frozen": True}


class ItemOrderChange(BaseModel):
    """New sort_order for one variant item."""

    id: str
    sort_order: int

    model_config = {"frozen": True}


class ItemAdditionPlan(BaseModel):
    """An exercise/protocol pairing appended to a variant."""

    item: VariantItem

    model_config = {"frozen": True}


class ItemRemovalPlan(BaseModel):
    """Outcome of a request to remove an item from a variant."""

    allowed: bool
    item_id: str
    variant_id: str
    reason: Optional[str] = None
    remaining_items: int = 0

    model_config = {"frozen": True}


# =============================================================================
# Labels and active selection
# =============================================================================


def plan_next_label(existing_variants: Sequence[Variant]) -> str:
    """
    Next label for a new variant.

    The label is the letter at index `len(existing_variants)`, so labels are
    reused after deletions. If that letter is still held by a remaining
    variant, the next unused letter after it is chosen.

    Args:
        existing_variants: Current variants of the block.

    Returns:
        Label for the new variant.
    """
    used = {variant.variant_label for variant in existing_variants}
    index = len(existing_variants)
    label = label_for_index(index)
    while label in used:
        index += 1
        label = label_for_index(index)
    return label


def select_active_label(
    variants: Sequence[Variant],
    deleted_label: str,
    previous_active: str,
) -> str:
    """
    Active label after deleting `deleted_label`.

    If the deleted variant was active, the first remaining variant by
    sort_order becomes active. Otherwise the active label is unchanged.

    Raises:
        InvalidParametersError: If no variant would remain.
    """
    if deleted_label != previous_active:
        return previous_active

    remaining = sorted(
        (v for v in variants if v.variant_label != deleted_label),
        key=lambda v: v.sort_order,
    )
    if not remaining:
        raise InvalidParametersError("No variant remains to become active")
    return remaining[0].variant_label


# =============================================================================
# Mutation planning
# =============================================================================


def plan_block_creation(
    name: str,
    *,
    coach_id: Optional[str] = None,
    description: Optional[str] = None,
    rounds: Optional[int] = None,
    id_factory: IdFactory = _new_id,
) -> BlockCreationPlan:
    """Plan a new block, owned by `coach_id`, with its default variant A."""
    block = Block(
        id=id_factory(),
        name=name,
        description=description,
        rounds=rounds,
        coach_id=coach_id,
    )
    variant = Variant(
        id=id_factory(),
        block_id=block.id,
        variant_label=DEFAULT_VARIANT_LABEL,
        name=default_variant_name(DEFAULT_VARIANT_LABEL),
        sort_order=0,
    )
    return BlockCreationPlan(block=block, default_variant=variant)


def plan_variant_creation(
    block_id: str,
    existing_variants: Sequence[Variant],
    *,
    name: Optional[str] = None,
    pairs: Sequence[Pair] = (),
    id_factory: IdFactory = _new_id,
) -> VariantCreationPlan:
    """
    Plan a new variant for a block.

    The variant gets the next label and sorts after every existing variant.
    `pairs` are (exercise_id, protocol_id) tuples that become its first
    items, in order. Without pairs the variant starts empty and must be
    filled before a workout using the block can be navigated.
    """
    label = plan_next_label(existing_variants)
    sort_order = max((v.sort_order for v in existing_variants), default=-1) + 1
    variant = Variant(
        id=id_factory(),
        block_id=block_id,
        variant_label=label,
        name=name or default_variant_name(label),
        sort_order=sort_order,
    )
    items = [
        _new_item(variant.id, exercise_id, protocol_id, order, id_factory)
        for order, (exercise_id, protocol_id) in enumerate(pairs)
    ]
    return VariantCreationPlan(variant=variant, items=items)


def plan_variant_deletion(
    variant_id: str,
    variants: Sequence[Variant],
    active_label: str,
    *,
    schedule: Sequence[SessionScheduleEntry] = (),
) -> VariantDeletionPlan:
    """
    Plan deleting a variant.

    Args:
        variant_id: Variant to delete.
        variants: All current variants of its block.
        active_label: Label the caller currently has active.
        schedule: Session schedule of the block, to report orphaned sessions.

    Returns:
        VariantDeletionPlan. `allowed` is False when the variant is the last
        one of its block.

    Raises:
        NotFoundError: If the variant is not among `variants`.
    """
    target = next((v for v in variants if v.id == variant_id), None)
    if target is None:
        raise NotFoundError(f"Variant '{variant_id}' not found")

    if len(variants) <= 1:
        logger.warning(f"Refusing to delete sole variant {variant_id} of block {target.block_id}")
        return VariantDeletionPlan(
            allowed=False,
            variant_id=variant_id,
            deleted_label=target.variant_label,
            reason="A block must keep at least one variant",
            new_active_label=active_label,
        )

    new_active = select_active_label(variants, target.variant_label, active_label)
    orphaned = sorted(
        entry.session_number
        for entry in schedule
        if entry.block_id == target.block_id and entry.variant_label == target.variant_label
    )
    return VariantDeletionPlan(
        allowed=True,
        variant_id=variant_id,
        deleted_label=target.variant_label,
        new_active_label=new_active,
        active_changed=new_active != active_label,
        orphaned_sessions=orphaned,
    )


def plan_variant_duplication(
    variant_id: str,
    variants: Sequence[Variant],
    items: Sequence[VariantItem],
    *,
    id_factory: IdFactory = _new_id,
) -> VariantDuplicationPlan:
    """
    Plan a deep copy of a variant.

    The copy receives the next label and fresh ids for itself and every
    item. Exercise/protocol references and relative item order are preserved.

    Args:
        variant_id: Variant to copy.
        variants: All current variants of its block.
        items: Items of the source variant (any order).

    Raises:
        NotFoundError: If the variant is not among `variants`.
    """
    source = next((v for v in variants if v.id == variant_id), None)
    if source is None:
        raise NotFoundError(f"Variant '{variant_id}' not found")

    creation = plan_variant_creation(source.block_id, variants, id_factory=id_factory)
    copy = creation.variant.model_copy(update={"notes": source.notes})

    source_items = sorted(
        (item for item in items if item.variant_id == source.id),
        key=lambda item: item.sort_order,
    )
    copied_items = [
        VariantItem(
            id=id_factory(),
            variant_id=copy.id,
            exercise_id=item.exercise_id,
            protocol_id=item.protocol_id,
            sort_order=item.sort_order,
        )
        for item in source_items
    ]
    return VariantDuplicationPlan(source_variant_id=source.id, variant=copy, items=copied_items)


def plan_variant_rename(
    variant: Variant,
    *,
    name: Optional[str] = None,
    notes: Optional[str] = None,
) -> VariantRenamePlan:
    """Plan a display-name/notes change. An empty name resets to the default."""
    changes: Dict[str, Optional[str]] = {}
    if name is not None:
        changes["name"] = name.strip() or default_variant_name(variant.variant_label)
    if notes is not None:
        changes["notes"] = notes.strip() or None
    if not changes:
        raise InvalidParametersError("Nothing to update: provide name or notes")
    return VariantRenamePlan(variant_id=variant.id, changes=changes)


def plan_item_reorder(
    items: Sequence[VariantItem],
    ordered_ids: Sequence[str],
) -> List[ItemOrderChange]:
    """
    Plan a dense re-numbering of a variant's items.

    Args:
        items: Current items of the variant.
        ordered_ids: Every item id, in the desired order.

    Returns:
        Changes for the items whose sort_order actually moves.

    Raises:
        InvalidParametersError: If `ordered_ids` is not exactly the item ids.
    """
    current = {item.id: item for item in items}
    if len(ordered_ids) != len(set(ordered_ids)) or set(ordered_ids) != set(current):
        raise InvalidParametersError(
            "Reorder must list every item of the variant exactly once"
        )
    return [
        ItemOrderChange(id=item_id, sort_order=index)
        for index, item_id in enumerate(ordered_ids)
        if current[item_id].sort_order != index
    ]


def plan_item_addition(
    variant: Variant,
    items: Sequence[VariantItem],
    exercise_id: str,
    protocol_id: str,
    *,
    id_factory: IdFactory = _new_id,
) -> ItemAdditionPlan:
    """
    Plan appending an exercise/protocol pairing to a variant.

    The item sorts after the variant's current last item, so existing
    positions never move.

    Raises:
        InvalidParametersError: If either reference is blank.
    """
    sort_order = max(
        (item.sort_order for item in items if item.variant_id == variant.id), default=-1
    ) + 1
    return ItemAdditionPlan(
        item=_new_item(variant.id, exercise_id, protocol_id, sort_order, id_factory)
    )


def plan_item_removal(item_id: str, items: Sequence[VariantItem]) -> ItemRemovalPlan:
    """
    Plan removing one item from a variant.

    Args:
        item_id: Item to remove.
        items: Current items of its variant.

    Returns:
        ItemRemovalPlan. `allowed` is False when the item is the variant's
        last one; a variant without items cannot be navigated.

    Raises:
        NotFoundError: If the item is not among `items`.
    """
    target = next((item for item in items if item.id == item_id), None)
    if target is None:
        raise NotFoundError(f"Item '{item_id}' not found")

    siblings = [item for item in items if item.variant_id == target.variant_id]
    if len(siblings) <= 1:
        logger.warning(f"Refusing to remove last item {item_id} of variant {target.variant_id}")
        return ItemRemovalPlan(
            allowed=False,
            item_id=item_id,
            variant_id=target.variant_id,
            reason="A variant must keep at least one item",
            remaining_items=len(siblings),
        )
    return ItemRemovalPlan(
        allowed=True,
        item_id=item_id,
        variant_id=target.variant_id,
        remaining_items=len(siblings) - 1,
    )


def _new_item(
    variant_id: str,
    exercise_id: str,
    protocol_id: str,
    sort_order: int,
    id_factory: IdFactory,
) -> VariantItem:
    exercise_id = (exercise_id or "").strip()
    protocol_id = (protocol_id or "").strip()
    if not exercise_id or not protocol_id:
        raise InvalidParametersError("An item needs both exercise_id and protocol_id")
    return VariantItem(
        id=id_factory(),
        variant_id=variant_id,
        exercise_id=exercise_id,
        protocol_id=protocol_id,
        sort_order=sort_order,
    )
