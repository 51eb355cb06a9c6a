"""
Domain services: navigation, variant editing rules and session schedules.

All services are pure and operate on in-memory snapshots.
"""

from domain.services.navigation_resolver import NavigationResolver
from domain.services.session_schedule import (
    DEFAULT_PATTERN,
    plan_session_schedule,
)
from domain.services.variant_manager import (
    BlockCreationPlan,
    ItemAdditionPlan,
    ItemOrderChange,
    ItemRemovalPlan,
    VariantCreationPlan,
    VariantDeletionPlan,
    VariantDuplicationPlan,
    VariantRenamePlan,
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

__all__ = [
    "NavigationResolver",
    # Variant manager
    "BlockCreationPlan",
    "VariantCreationPlan",
    "VariantDeletionPlan",
    "VariantDuplicationPlan",
    "VariantRenamePlan",
    "ItemOrderChange",
    "ItemAdditionPlan",
    "ItemRemovalPlan",
    "label_for_index",
    "plan_next_label",
    "select_active_label",
    "plan_block_creation",
    "plan_variant_creation",
    "plan_variant_deletion",
    "plan_variant_duplication",
    "plan_variant_rename",
    "plan_item_reorder",
    "plan_item_addition",
    "plan_item_removal",
    # Session schedule
    "DEFAULT_PATTERN",
    "plan_session_schedule",
]
