"""
Domain models for the plan engine.

These models represent the core concepts of a coach-authored plan:
- Workout: the root container, read as a WorkoutSnapshot
- PlanItem: one ordered entry (exercise, block, rest or info)
- Block / Variant / VariantItem: alternative realizations of a block step
- ExerciseRef / ProtocolRef: read-only library data
- NavigationCursor / NavigationResult: the navigation contract

Usage:
    >>> from domain.models import WorkoutSnapshot, Workout

    >>> snapshot = WorkoutSnapshot.model_validate(payload)
    >>> json_str = snapshot.model_dump_json()
"""

from domain.models.block import Block, SessionScheduleEntry, Variant, VariantItem
from domain.models.navigation import (
    BlockContext,
    BlockContextItem,
    NavigationContext,
    NavigationCursor,
    NavigationPosition,
    NavigationResult,
    NavigationStatus,
    NextBlock,
    PositionKind,
)
from domain.models.plan_item import (
    BlockPlanItem,
    ExercisePlanItem,
    InfoPlanItem,
    PlanItem,
    PlanItemType,
    RestPlanItem,
)
from domain.models.reference import ExerciseRef, ProtocolRef
from domain.models.workout import Workout, WorkoutSnapshot

__all__ = [
    # Structure
    "Workout",
    "WorkoutSnapshot",
    "PlanItem",
    "ExercisePlanItem",
    "BlockPlanItem",
    "RestPlanItem",
    "InfoPlanItem",
    "Block",
    "Variant",
    "VariantItem",
    "SessionScheduleEntry",
    # Reference data
    "ExerciseRef",
    "ProtocolRef",
    # Navigation
    "NavigationCursor",
    "NavigationContext",
    "NavigationPosition",
    "NavigationResult",
    "NavigationStatus",
    "BlockContext",
    "BlockContextItem",
    "NextBlock",
    # Enums
    "PlanItemType",
    "PositionKind",
]
