"""Segment model produced by the chunker."""

from pydantic import BaseModel, ConfigDict, Field


class Segment(BaseModel):
    """A contiguous slice of the source text."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="Position in the segmentation")
    text: str
    start: int = Field(..., ge=0, description="Offset of the first character")
    end: int = Field(..., ge=0, description="Offset one past the last character")

    def __len__(self) -> int:
        return self.end - self.start
