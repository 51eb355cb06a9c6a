"""
Navigation cursor and result models.

The cursor is the caller-supplied "where am I" pointer; it is never
persisted by the engine. A NavigationResult describes the current position,
the next and previous actionable positions, and the block context shown to
the athlete.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from domain.models.reference import ExerciseRef, ProtocolRef


class NavigationCursor(BaseModel):
    """
    Caller-supplied position.

    `exercise_id` and `protocol_id` identify a position inside a block's
    active variant and must be given together. `variant_label` pins the
    active variant of the cursor's block; `variant_pins` pins other block
    plan items (plan_item_id -> label) so that leaving a pinned block and
    coming back re-enters the same variant. Without a pin, `session_number`
    selects the variant via the block's session schedule. `sort_order`
    disambiguates a pairing that occurs more than once in a variant.
    """

    plan_item_id: str = Field(..., min_length=1)
    exercise_id: Optional[str] = None
    protocol_id: Optional[str] = None
    program_id: Optional[str] = None
    variant_label: Optional[str] = None
    variant_pins: Dict[str, str] = Field(default_factory=dict)
    session_number: Optional[int] = Field(default=None, ge=1)
    sort_order: Optional[int] = None

    model_config = {"frozen": True}

    @property
    def has_pair(self) -> bool:
        return self.exercise_id is not None and self.protocol_id is not None

    @property
    def has_partial_pair(self) -> bool:
        return (self.exercise_id is None) != (self.protocol_id is None)


class NavigationContext(str, Enum):
    """Where the cursor sits relative to block structure."""

    OUTSIDE = "outside"
    INSIDE_BLOCK_VARIANT = "inside_block_variant"


class PositionKind(str, Enum):
    """Kinds of navigation positions."""

    EXERCISE = "exercise"  # a bare exercise plan item
    BLOCK_ITEM = "block_item"  # a variant item inside a block
    DISPLAY = "display"  # a rest/info item the cursor was parked on
    WORKOUT_START = "workout_start"
    WORKOUT_END = "workout_end"


class NavigationPosition(BaseModel):
    """A resolved position in the plan."""

    kind: PositionKind
    plan_item_id: Optional[str] = None
    exercise_id: Optional[str] = None
    protocol_id: Optional[str] = None
    block_id: Optional[str] = None
    variant_id: Optional[str] = None
    variant_label: Optional[str] = None
    sort_order: Optional[int] = None
    variant_pins: Dict[str, str] = Field(
        default_factory=dict,
        description="Pinned variant labels to carry into the next cursor",
    )

    model_config = {"frozen": True}

    @classmethod
    def start(cls) -> "NavigationPosition":
        return cls(kind=PositionKind.WORKOUT_START)

    @classmethod
    def end(cls) -> "NavigationPosition":
        return cls(kind=PositionKind.WORKOUT_END)

    @property
    def is_boundary(self) -> bool:
        """Check if this is the start-of-workout or end-of-workout marker."""
        return self.kind in (PositionKind.WORKOUT_START, PositionKind.WORKOUT_END)

    def to_cursor(
        self,
        *,
        program_id: Optional[str] = None,
        session_number: Optional[int] = None,
    ) -> Optional[NavigationCursor]:
        """
        Convert this position back into a cursor.

        Returns None for the workout boundaries, which have no plan item.
        Only explicitly pinned variants are carried over; an unpinned block
        position resolves through the schedule again.
        """
        if self.is_boundary or self.plan_item_id is None:
            return None
        if self.kind != PositionKind.BLOCK_ITEM:
            return NavigationCursor(
                plan_item_id=self.plan_item_id,
                program_id=program_id,
                variant_pins=dict(self.variant_pins),
                session_number=session_number,
            )
        return NavigationCursor(
            plan_item_id=self.plan_item_id,
            exercise_id=self.exercise_id,
            protocol_id=self.protocol_id,
            program_id=program_id,
            variant_pins=dict(self.variant_pins),
            session_number=session_number,
            sort_order=self.sort_order,
        )


class BlockContextItem(BaseModel):
    """Summary of one variant item for the block overview."""

    sort_order: int
    exercise_id: str
    protocol_id: str
    exercise_title: Optional[str] = None
    protocol_name: Optional[str] = None


class BlockContext(BaseModel):
    """The active variant of the current block, as shown to the athlete."""

    block_id: str
    block_name: str
    rounds: Optional[int] = None
    variant_id: str
    variant_label: str
    current_index: int = Field(..., ge=0)
    total_items: int = Field(..., ge=1)
    items: List[BlockContextItem] = Field(default_factory=list)


class NextBlock(BaseModel):
    """The block entered by the next step, when it differs from the current one."""

    plan_item_id: str
    block_id: str
    block_name: str
    variant_label: str
    first_exercise: NavigationPosition


class NavigationStatus(str, Enum):
    """Terminal status of a resolution."""

    OK = "ok"
    EMPTY_WORKOUT = "EMPTY_WORKOUT"


class NavigationResult(BaseModel):
    """Outcome of resolving a cursor against a plan tree."""

    status: NavigationStatus = NavigationStatus.OK
    workout_id: str
    context: Optional[NavigationContext] = None
    current: Optional[NavigationPosition] = None
    next: Optional[NavigationPosition] = None
    previous: Optional[NavigationPosition] = None

    exercise: Optional[ExerciseRef] = None
    protocol: Optional[ProtocolRef] = None
    block_context: Optional[BlockContext] = None
    next_block: Optional[NextBlock] = None

    has_next_exercise: bool = False
    is_last_exercise: bool = False
    video_url: Optional[str] = None
    show_video: bool = False
    program_id: Optional[str] = None

    @classmethod
    def empty(cls, workout_id: str, program_id: Optional[str] = None) -> "NavigationResult":
        """Result for a workout with no actionable step."""
        return cls(
            status=NavigationStatus.EMPTY_WORKOUT,
            workout_id=workout_id,
            program_id=program_id,
        )

    @property
    def is_empty(self) -> bool:
        return self.status == NavigationStatus.EMPTY_WORKOUT

    @property
    def is_end_of_workout(self) -> bool:
        return self.next is not None and self.next.kind == PositionKind.WORKOUT_END
