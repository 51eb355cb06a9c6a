"""
PlanItem discriminated union.

A workout is an ordered list of plan items. Each item is tagged with its
`item_type` and carries only the payload for that tag:

- exercise: a bare exercise reference (`exercise_id`)
- block: a reference to a Block of variants (`block_id`)
- rest: a presentation-only pause with free-text content
- info: presentation-only free-text content
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class PlanItemType(str, Enum):
    """Tags of the PlanItem union."""

    EXERCISE = "exercise"
    BLOCK = "block"
    REST = "rest"
    INFO = "info"


class _PlanItemBase(BaseModel):
    """Fields shared by every plan item."""

    id: str = Field(..., min_length=1, description="Plan item identifier")
    workout_id: str = Field(..., min_length=1, description="Parent workout id")
    sort_order: int = Field(
        ..., description="Position within the workout (unique, gaps allowed)"
    )
    video_url: Optional[str] = Field(
        default=None, description="Optional video shown with this item"
    )
    show_video: bool = Field(default=False, description="Whether to show the video")

    model_config = {"frozen": True}

    @property
    def is_actionable(self) -> bool:
        """Whether navigation can land on this item."""
        return False


class ExercisePlanItem(_PlanItemBase):
    """A bare exercise placed directly in the workout."""

    item_type: Literal["exercise"] = "exercise"
    exercise_id: str = Field(..., min_length=1)

    @property
    def is_actionable(self) -> bool:
        return True


class BlockPlanItem(_PlanItemBase):
    """A block of variants placed in the workout."""

    item_type: Literal["block"] = "block"
    block_id: str = Field(..., min_length=1)

    @property
    def is_actionable(self) -> bool:
        return True


class RestPlanItem(_PlanItemBase):
    """A rest pause (display only)."""

    item_type: Literal["rest"] = "rest"
    content: Optional[str] = None


class InfoPlanItem(_PlanItemBase):
    """Free-text information (display only)."""

    item_type: Literal["info"] = "info"
    content: Optional[str] = None


PlanItem = Annotated[
    Union[ExercisePlanItem, BlockPlanItem, RestPlanItem, InfoPlanItem],
    Field(discriminator="item_type"),
]
