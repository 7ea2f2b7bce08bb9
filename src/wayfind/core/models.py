from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Anchor(BaseModel):
    """A persisted waypoint on a path; ``index`` defines traversal order."""

    index: int = Field(..., ge=0)
    x: float
    y: float

    @property
    def point(self) -> Point:
        return Point(x=self.x, y=self.y)


class BoundingBox(BaseModel):
    x: float
    y: float
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)

    @property
    def center(self) -> Point:
        return Point(x=self.x + self.width / 2, y=self.y + self.height / 2)


class Room(BaseModel):
    name: str
    number: Optional[str] = None
    bounding_box: BoundingBox


class RoomRef(BaseModel):
    name: str
    number: Optional[str] = None

    @property
    def label(self) -> str:
        if self.number:
            return f"{self.name} ({self.number})"
        return self.name


class PathRecord(BaseModel):
    """Path as handed over by the persistence layer: endpoints + anchor polyline."""

    path_id: str
    from_room: RoomRef
    to_room: RoomRef
    anchors: List[Anchor] = Field(default_factory=list)

    def sorted_anchors(self) -> List[Anchor]:
        # Rows from the database may arrive unordered; segmentation never re-sorts.
        return sorted(self.anchors, key=lambda a: a.index)

    @property
    def total_segments(self) -> int:
        return max(0, len(self.anchors) - 1)


class InstructionSet(BaseModel):
    path_id: str
    descriptive_instructions: List[str] = Field(default_factory=list)
    concise_instructions: List[str] = Field(default_factory=list)


class StepSize(str, Enum):
    SMALL = "SMALL"
    MEDIUM = "MEDIUM"
    LARGE = "LARGE"
