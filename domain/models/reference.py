"""
Read-only reference data: exercises and protocols.

These rows are owned by the exercise and protocol libraries. The plan engine
only reads them to enrich navigation results.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ExerciseRef(BaseModel):
    """An exercise from the library."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    cover_image_url: Optional[str] = None
    youtube_url: Optional[str] = None

    model_config = {"frozen": True}


class ProtocolRef(BaseModel):
    """A protocol (sets, reps, intensity) from the library."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    sets: Optional[int] = Field(default=None, ge=0)
    repetitions: Optional[int] = Field(default=None, ge=0)
    intensity_value: Optional[float] = None
    intensity_type: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def summary(self) -> str:
        """Short prescription, e.g. '3 x 10'."""
        if self.sets and self.repetitions:
            return f"{self.sets} x {self.repetitions}"
        return self.name
