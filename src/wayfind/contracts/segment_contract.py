# path: wayfind/src/wayfind/contracts/segment_contract.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

Direction = Literal["forward", "backward", "left", "right"]


@dataclass(frozen=True)
class PathSegment:
    direction: Direction
    steps: int
    nearby_rooms: Tuple[str, ...] = ()
    relative_direction: Optional[str] = None  # filled by the relativizer
    facing_direction: Optional[Direction] = None  # heading after the segment

    def to_dict(self) -> dict:
        return {
            "direction": self.direction,
            "steps": self.steps,
            "nearby_rooms": list(self.nearby_rooms),
            "relative_direction": self.relative_direction,
            "facing_direction": self.facing_direction,
        }
