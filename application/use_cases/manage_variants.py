"""
ManageVariants Use Case.

Orchestrates coach-side edits of a block's structure:
- create a block together with its default variant A
- create, delete, duplicate and rename variants
- add, remove and reorder a variant's items
- replace a block's session schedule

Workflow for every edit:
1. Read the block and check that the caller owns it
2. Read the current block structure via the block repository
3. Compute the legal resulting state with the variant manager
4. Refuse (without mutating) when an invariant would break
5. Persist the plan
6. Return a typed result
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from application.ports import BlockRepository
from domain.exceptions import (
    BlockCreationError,
    ErrorCode,
    InvalidParametersError,
    NotFoundError,
    PlanEngineError,
    UnauthorizedAccessError,
)
from domain.models import Block, SessionScheduleEntry, Variant, VariantItem
from domain.services import (
    ItemRemovalPlan,
    VariantDeletionPlan,
    plan_block_creation,
    plan_item_addition,
    plan_item_removal,
    plan_item_reorder,
    plan_session_schedule,
    plan_variant_creation,
    plan_variant_deletion,
    plan_variant_duplication,
    plan_variant_rename,
)
from domain.services.session_schedule import MAX_SESSION_COUNT

logger = logging.getLogger(__name__)


@dataclass
class BlockMutationResult:
    """Result of creating a block."""

    success: bool
    block: Optional[Block] = None
    default_variant: Optional[Variant] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None


@dataclass
class VariantMutationResult:
    """Result of a variant or item edit."""

    success: bool
    variant: Optional[Variant] = None
    items: List[VariantItem] = field(default_factory=list)
    active_label: Optional[str] = None
    deletion: Optional[VariantDeletionPlan] = None
    removal: Optional[ItemRemovalPlan] = None
    refused: bool = False
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None


@dataclass
class ScheduleResult:
    """Result of replacing a session schedule."""

    success: bool
    entries: List[SessionScheduleEntry] = field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None


class ManageVariantsUseCase:
    """
    Use case for editing block variants.

    Every edit is made on behalf of `user_id`, who must be the coach that
    owns the block.

    Dependencies are injected via constructor for testability.

    Usage:
        >>> use_case = ManageVariantsUseCase(block_repo=repo)
        >>> result = use_case.delete_variant("b1", "v-a", user_id="coach-1", active_label="A")
        >>> if result.refused:
        ...     print(result.error)
    """

    def __init__(
        self,
        block_repo: BlockRepository,
        *,
        max_sessions: int = MAX_SESSION_COUNT,
    ) -> None:
        """
        Initialize the use case with required dependencies.

        Args:
            block_repo: Repository for block structure persistence
            max_sessions: Upper bound for session schedules
        """
        self._block_repo = block_repo
        self._max_sessions = max_sessions

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def create_block(
        self,
        name: str,
        *,
        user_id: str,
        description: Optional[str] = None,
        rounds: Optional[int] = None,
    ) -> BlockMutationResult:
        """
        Create a block owned by `user_id` with its default variant A in one
        atomic call.

        Args:
            name: Block name
            user_id: Coach creating (and owning) the block
            description: Optional description
            rounds: Optional number of rounds

        Returns:
            BlockMutationResult with the created block and variant
        """
        plan = plan_block_creation(
            name, coach_id=user_id, description=description, rounds=rounds
        )
        try:
            block = self._block_repo.create_block_with_default_variant(
                plan.block, plan.default_variant
            )
        except BlockCreationError as e:
            logger.error(f"Failed to create block '{name}'; neither it nor variant A was stored: {e}")
            return BlockMutationResult(
                success=False,
                error=f"Block and its default variant A were not created: {e}",
            )

        logger.info(f"Block {block.id} created by {user_id} with default variant {plan.default_variant.id}")
        return BlockMutationResult(
            success=True, block=block, default_variant=plan.default_variant
        )

    # -------------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------------

    def create_variant(
        self,
        block_id: str,
        *,
        user_id: str,
        name: Optional[str] = None,
        items: Sequence[Tuple[str, str]] = (),
    ) -> VariantMutationResult:
        """
        Add a variant with the next label.

        Args:
            block_id: Block to extend
            user_id: Caller; must own the block
            name: Optional display name (defaults to "Variant <label>")
            items: Optional (exercise_id, protocol_id) pairs to start with

        Returns:
            VariantMutationResult; the new variant's label becomes active
        """
        try:
            variants = self._load_variants(block_id, user_id)
            plan = plan_variant_creation(block_id, variants, name=name, pairs=items)
            variant = self._block_repo.insert_variant(plan.variant, plan.items)
        except PlanEngineError as e:
            return self._failure(e)
        except Exception as e:
            logger.error(f"Failed to create variant for block {block_id}: {e}")
            return VariantMutationResult(success=False, error=f"Failed to create variant: {e}")

        if not plan.items:
            logger.info(f"Variant {variant.variant_label} of block {block_id} is empty until items are added")
        logger.info(f"Variant {variant.variant_label} created for block {block_id}")
        return VariantMutationResult(
            success=True,
            variant=variant,
            items=list(plan.items),
            active_label=variant.variant_label,
        )

    def delete_variant(
        self,
        block_id: str,
        variant_id: str,
        *,
        user_id: str,
        active_label: Optional[str] = None,
    ) -> VariantMutationResult:
        """
        Delete a variant unless it is the last one of its block.

        Args:
            block_id: Parent block
            variant_id: Variant to delete
            user_id: Caller; must own the block
            active_label: Label the caller has active (defaults to the first variant)

        Returns:
            VariantMutationResult with the deletion plan. `refused` is True
            (and nothing is deleted) when the variant is the sole one.
        """
        try:
            variants = self._load_variants(block_id, user_id)
            self._require_member(variant_id, variants, block_id)
            if active_label is not None and active_label not in {v.variant_label for v in variants}:
                raise InvalidParametersError(
                    f"Block '{block_id}' has no variant '{active_label}'"
                )
            current_active = active_label or variants[0].variant_label
            schedule = self._block_repo.get_schedule(block_id)
            plan = plan_variant_deletion(
                variant_id, variants, current_active, schedule=schedule
            )
        except PlanEngineError as e:
            return self._failure(e)

        if not plan.allowed:
            return VariantMutationResult(
                success=False,
                deletion=plan,
                active_label=plan.new_active_label,
                refused=True,
                error=plan.reason,
                error_code=ErrorCode.INVALID_PARAMETERS,
            )

        try:
            deleted = self._block_repo.delete_variant(variant_id)
        except Exception as e:
            logger.error(f"Failed to delete variant {variant_id}: {e}")
            return VariantMutationResult(success=False, error=f"Failed to delete variant: {e}")

        if not deleted:
            return VariantMutationResult(
                success=False,
                error=f"Variant '{variant_id}' not found",
                error_code=ErrorCode.NOT_FOUND,
            )

        if plan.orphaned_sessions:
            logger.warning(
                f"Sessions {plan.orphaned_sessions} of block {block_id} still name "
                f"deleted variant {plan.deleted_label}"
            )
        logger.info(
            f"Variant {plan.deleted_label} deleted from block {block_id}; "
            f"active is {plan.new_active_label}"
        )
        return VariantMutationResult(
            success=True, deletion=plan, active_label=plan.new_active_label
        )

    def duplicate_variant(
        self, block_id: str, variant_id: str, *, user_id: str
    ) -> VariantMutationResult:
        """
        Copy a variant and its items under the next label.

        Args:
            block_id: Parent block
            variant_id: Variant to copy
            user_id: Caller; must own the block

        Returns:
            VariantMutationResult with the new variant and its copied items
        """
        try:
            variants = self._load_variants(block_id, user_id)
            self._require_member(variant_id, variants, block_id)
            items = self._block_repo.list_variant_items(variant_id)
            plan = plan_variant_duplication(variant_id, variants, items)
            variant = self._block_repo.insert_variant(plan.variant, plan.items)
        except PlanEngineError as e:
            return self._failure(e)
        except Exception as e:
            logger.error(f"Failed to duplicate variant {variant_id}: {e}")
            return VariantMutationResult(success=False, error=f"Failed to duplicate variant: {e}")

        logger.info(
            f"Variant {variant_id} duplicated as {variant.variant_label} "
            f"({len(plan.items)} items)"
        )
        return VariantMutationResult(
            success=True,
            variant=variant,
            items=list(plan.items),
            active_label=variant.variant_label,
        )

    def rename_variant(
        self,
        block_id: str,
        variant_id: str,
        *,
        user_id: str,
        name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> VariantMutationResult:
        """Change a variant's display name and/or notes. The label is kept."""
        try:
            variants = self._load_variants(block_id, user_id)
            variant = self._require_member(variant_id, variants, block_id)
            plan = plan_variant_rename(variant, name=name, notes=notes)
            updated = self._block_repo.update_variant(variant_id, plan.changes)
        except PlanEngineError as e:
            return self._failure(e)
        except Exception as e:
            logger.error(f"Failed to rename variant {variant_id}: {e}")
            return VariantMutationResult(success=False, error=f"Failed to update variant: {e}")

        if updated is None:
            return VariantMutationResult(
                success=False,
                error="Failed to update variant",
            )
        return VariantMutationResult(success=True, variant=updated)

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    def add_item(
        self,
        block_id: str,
        variant_id: str,
        exercise_id: str,
        protocol_id: str,
        *,
        user_id: str,
    ) -> VariantMutationResult:
        """
        Append an exercise/protocol pairing to a variant.

        Returns:
            VariantMutationResult with the variant's items after the change
        """
        try:
            variants = self._load_variants(block_id, user_id)
            variant = self._require_member(variant_id, variants, block_id)
            items = self._block_repo.list_variant_items(variant_id)
            plan = plan_item_addition(variant, items, exercise_id, protocol_id)
            self._block_repo.insert_item(plan.item)
            updated_items = self._block_repo.list_variant_items(variant_id)
        except PlanEngineError as e:
            return self._failure(e)
        except Exception as e:
            logger.error(f"Failed to add item to variant {variant_id}: {e}")
            return VariantMutationResult(success=False, error=f"Failed to add item: {e}")

        logger.info(f"Variant {variant_id}: added {exercise_id}/{protocol_id} at {plan.item.sort_order}")
        return VariantMutationResult(success=True, variant=variant, items=updated_items)

    def remove_item(
        self,
        block_id: str,
        variant_id: str,
        item_id: str,
        *,
        user_id: str,
    ) -> VariantMutationResult:
        """
        Remove an item unless it is the last one of its variant.

        Returns:
            VariantMutationResult with the removal plan. `refused` is True
            (and nothing is removed) when the item is the sole one.
        """
        try:
            variants = self._load_variants(block_id, user_id)
            variant = self._require_member(variant_id, variants, block_id)
            items = self._block_repo.list_variant_items(variant_id)
            plan = plan_item_removal(item_id, items)
        except PlanEngineError as e:
            return self._failure(e)

        if not plan.allowed:
            return VariantMutationResult(
                success=False,
                variant=variant,
                items=items,
                removal=plan,
                refused=True,
                error=plan.reason,
                error_code=ErrorCode.INVALID_PARAMETERS,
            )

        try:
            deleted = self._block_repo.delete_item(item_id)
            remaining = self._block_repo.list_variant_items(variant_id)
        except Exception as e:
            logger.error(f"Failed to remove item {item_id}: {e}")
            return VariantMutationResult(success=False, error=f"Failed to remove item: {e}")

        if not deleted:
            return VariantMutationResult(
                success=False,
                error=f"Item '{item_id}' not found",
                error_code=ErrorCode.NOT_FOUND,
            )

        logger.info(f"Item {item_id} removed from variant {variant_id}; {len(remaining)} left")
        return VariantMutationResult(
            success=True, variant=variant, items=remaining, removal=plan
        )

    def reorder_items(
        self,
        block_id: str,
        variant_id: str,
        ordered_item_ids: Sequence[str],
        *,
        user_id: str,
    ) -> VariantMutationResult:
        """Renumber a variant's items densely in the given order."""
        try:
            variants = self._load_variants(block_id, user_id)
            variant = self._require_member(variant_id, variants, block_id)
            items = self._block_repo.list_variant_items(variant_id)
            changes = plan_item_reorder(items, ordered_item_ids)
            if changes:
                self._block_repo.update_item_orders(changes)
            reordered = self._block_repo.list_variant_items(variant_id)
        except PlanEngineError as e:
            return self._failure(e)
        except Exception as e:
            logger.error(f"Failed to reorder items of variant {variant_id}: {e}")
            return VariantMutationResult(success=False, error=f"Failed to reorder items: {e}")

        logger.info(f"Variant {variant_id}: {len(changes)} item(s) moved")
        return VariantMutationResult(success=True, variant=variant, items=reordered)

    # -------------------------------------------------------------------------
    # Schedule
    # -------------------------------------------------------------------------

    def update_schedule(
        self,
        block_id: str,
        session_count: int,
        pattern: Optional[Sequence[str]] = None,
        *,
        user_id: str,
    ) -> ScheduleResult:
        """
        Replace a block's session schedule.

        Args:
            block_id: Block to schedule
            session_count: Number of sessions
            pattern: Optional label rotation (defaults to A A B A B B A B)
            user_id: Caller; must own the block

        Returns:
            ScheduleResult with the stored entries
        """
        try:
            variants = self._load_variants(block_id, user_id)
            entries = plan_session_schedule(
                block_id,
                variants,
                session_count,
                pattern,
                max_sessions=self._max_sessions,
            )
            stored = self._block_repo.replace_schedule(block_id, entries)
        except PlanEngineError as e:
            logger.warning(f"Schedule update refused for block {block_id}: {e.message}")
            return ScheduleResult(success=False, error=e.message, error_code=e.code)
        except Exception as e:
            logger.error(f"Failed to store schedule of block {block_id}: {e}")
            return ScheduleResult(success=False, error=f"Failed to update schedule: {e}")

        return ScheduleResult(success=True, entries=stored)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load_variants(self, block_id: str, user_id: str) -> List[Variant]:
        block = self._block_repo.get_block(block_id)
        if block is None:
            raise NotFoundError(f"Block '{block_id}' not found")
        if not block.is_owned_by(user_id):
            logger.warning(f"Profile {user_id} tried to edit block {block_id} owned by {block.coach_id}")
            raise UnauthorizedAccessError(f"Block '{block_id}' is not owned by the caller")
        return sorted(self._block_repo.list_variants(block_id), key=lambda v: v.sort_order)

    @staticmethod
    def _require_member(variant_id: str, variants: Sequence[Variant], block_id: str) -> Variant:
        for variant in variants:
            if variant.id == variant_id:
                return variant
        raise NotFoundError(f"Variant '{variant_id}' not found in block '{block_id}'")

    @staticmethod
    def _failure(error: PlanEngineError) -> VariantMutationResult:
        logger.warning(f"Variant edit failed: {error.code.value} {error.message}")
        return VariantMutationResult(
            success=False,
            error=error.message,
            error_code=error.code,
        )
