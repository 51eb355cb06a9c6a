"""
Block, Variant and VariantItem models.

A Block is one structural step of a workout (for example a circuit). It
holds one or more alternative Variants, labelled A, B, C, ... in creation
order. Each Variant is an ordered list of VariantItems, and each
VariantItem pairs one exercise with one protocol: the atomic unit of work
an athlete performs.

Labels are unique within a Block but are not stable identifiers; code that
needs identity uses `id`.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Block(BaseModel):
    """A container of alternative variants."""

    id: str = Field(..., min_length=1, description="Block identifier")
    name: str = Field(..., min_length=1, max_length=200, description="Block name")
    description: Optional[str] = Field(default=None, max_length=2000)
    rounds: Optional[int] = Field(
        default=None, ge=1, description="Number of rounds through the active variant"
    )
    is_archived: bool = Field(default=False)
    coach_id: Optional[str] = Field(default=None, description="Profile id of the owning coach")

    model_config = {"frozen": True}

    def is_owned_by(self, profile_id: str) -> bool:
        return self.coach_id is not None and self.coach_id == profile_id

    def __str__(self) -> str:
        if self.rounds and self.rounds > 1:
            return f"{self.name} x{self.rounds} rounds"
        return self.name


class Variant(BaseModel):
    """One concrete realization of a block."""

    id: str = Field(..., min_length=1, description="Variant identifier")
    block_id: str = Field(..., min_length=1, description="Parent block id")
    variant_label: str = Field(
        ..., min_length=1, max_length=3, description="Positional label (A, B, C, ...)"
    )
    name: Optional[str] = Field(default=None, max_length=200, description="Display name")
    notes: Optional[str] = Field(default=None, max_length=2000)
    sort_order: int = Field(..., description="Position within the block")

    model_config = {"frozen": True}

    @field_validator("variant_label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        """Labels are upper-case letters."""
        if not v.isalpha() or not v.isupper():
            raise ValueError(f"Variant label must be upper-case letters, got '{v}'")
        return v

    @property
    def display_name(self) -> str:
        return self.name or f"Variant {self.variant_label}"


class VariantItem(BaseModel):
    """One (exercise, protocol) pairing inside a variant."""

    id: str = Field(..., min_length=1, description="Variant item identifier")
    variant_id: str = Field(..., min_length=1, description="Parent variant id")
    exercise_id: str = Field(..., min_length=1)
    protocol_id: str = Field(..., min_length=1)
    sort_order: int = Field(..., description="Position within the variant")

    model_config = {"frozen": True}

    def matches(self, exercise_id: str, protocol_id: str) -> bool:
        """Check whether this item is the given exercise/protocol pairing."""
        return self.exercise_id == exercise_id and self.protocol_id == protocol_id


class SessionScheduleEntry(BaseModel):
    """Maps the nth session of a block to the variant performed in it."""

    block_id: str = Field(..., min_length=1)
    session_number: int = Field(..., ge=1, description="1-based session number")
    variant_label: str = Field(..., min_length=1, max_length=3)

    model_config = {"frozen": True}
