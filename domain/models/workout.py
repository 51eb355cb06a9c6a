"""
Workout root and the structural snapshot the engine operates on.

A WorkoutSnapshot is one consistent, point-in-time read of a workout's
structure. Blocks, variants and variant items are supplied as flat arenas
indexed by id rather than nested objects, so that PlanTree can validate the
structural invariants once at load time.

Examples:
    >>> snapshot = WorkoutSnapshot(
    ...     workout=Workout(id="w1", title="Full Body"),
    ...     plan_items=[
    ...         {"id": "p1", "workout_id": "w1", "sort_order": 0,
    ...          "item_type": "exercise", "exercise_id": "e1"},
    ...     ],
    ... )
    >>> snapshot.plan_items[0].item_type
    'exercise'
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from domain.models.block import Block, SessionScheduleEntry, Variant, VariantItem
from domain.models.plan_item import PlanItem
from domain.models.reference import ExerciseRef, ProtocolRef


class Workout(BaseModel):
    """Root container of a training plan."""

    id: str = Field(..., min_length=1, description="Workout identifier")
    title: str = Field(..., min_length=1, max_length=200, description="Workout title")
    short_description: Optional[str] = Field(default=None, max_length=2000)
    cover_image_url: Optional[str] = None
    is_archived: bool = Field(default=False)

    model_config = {"frozen": True}


class WorkoutSnapshot(BaseModel):
    """
    Full structural tree for one workout, as flat arenas.

    Supplied by the snapshot provider; never mutated by the engine.
    """

    workout: Workout
    plan_items: List[PlanItem] = Field(default_factory=list)
    blocks: List[Block] = Field(default_factory=list)
    variants: List[Variant] = Field(default_factory=list)
    variant_items: List[VariantItem] = Field(default_factory=list)
    exercises: List[ExerciseRef] = Field(default_factory=list)
    protocols: List[ProtocolRef] = Field(default_factory=list)
    session_schedules: List[SessionScheduleEntry] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        """Check if the workout has no plan items at all."""
        return not self.plan_items
