from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from wayfind.core.models import Anchor, BoundingBox, PathRecord, Room, RoomRef


def make_anchors(points: Iterable[Tuple[float, float]]) -> List[Anchor]:
    return [Anchor(index=i, x=x, y=y) for i, (x, y) in enumerate(points)]


def make_room(name: str, cx: float, cy: float, w: float = 20, h: float = 20) -> Room:
    """Room whose bounding-box center sits at (cx, cy)."""
    return Room(name=name, bounding_box=BoundingBox(x=cx - w / 2, y=cy - h / 2, width=w, height=h))


def make_path(path_id: str, points: Iterable[Tuple[float, float]], to_name: str = "Lab") -> PathRecord:
    return PathRecord(
        path_id=path_id,
        from_room=RoomRef(name="Lobby", number="100"),
        to_room=RoomRef(name=to_name),
        anchors=make_anchors(points),
    )


class FakeRedis:
    """Just enough of redis.Redis for the store."""

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}
        self.expiry: Dict[str, Optional[int]] = {}

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self.data[key] = value
        self.expiry[key] = ex
        return True

    def delete(self, key: str) -> int:
        return 1 if self.data.pop(key, None) is not None else 0
