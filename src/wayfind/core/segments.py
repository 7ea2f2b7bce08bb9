"""Path segmentation: turn an ordered anchor polyline into movement segments."""
from __future__ import annotations

import logging
from math import floor, hypot
from typing import List, Optional, Sequence

from shapely.geometry import LineString
from shapely.geometry import Point as ShapelyPoint

from wayfind.contracts.segment_contract import Direction, PathSegment
from wayfind.core.models import Anchor, Point, Room

log = logging.getLogger(__name__)

STEP_PIXELS = 20.0   # one medium step on the floorplan canvas
NEARBY_PX = 100.0    # 5 steps


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, 7.5 -> 8)."""
    return int(floor(value + 0.5))


def get_direction(start: Point, end: Point) -> Direction:
    """
    Classify a hop into one of four canvas directions.

    Canvas y grows downward, so decreasing y is "forward". When
    ``|dx| == |dy|`` the vertical branch wins.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    if abs(dx) > abs(dy):
        return "right" if dx > 0 else "left"
    return "forward" if dy < 0 else "backward"


def perpendicular_distance(point: Point, line_start: Point, line_end: Point) -> float:
    """Distance from *point* to the segment [line_start, line_end] (not the infinite line)."""
    p = ShapelyPoint(point.x, point.y)
    if line_start.x == line_end.x and line_start.y == line_end.y:
        return p.distance(ShapelyPoint(line_start.x, line_start.y))
    seg = LineString([(line_start.x, line_start.y), (line_end.x, line_end.y)])
    return float(seg.distance(p))


def nearby_rooms(start: Point, end: Point, rooms: Sequence[Room], radius_px: float = NEARBY_PX) -> List[str]:
    """Names of rooms whose bounding-box center lies within *radius_px* of the segment."""
    return [
        room.name
        for room in rooms
        if perpendicular_distance(room.bounding_box.center, start, end) <= radius_px
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def calculate_path_segments(
    anchors: Sequence[Optional[Anchor]],
    rooms: Sequence[Room],
) -> List[PathSegment]:
    """
    Build one PathSegment per consecutive anchor pair.

    Parameters
    ----------
    anchors : sequence of Anchor
        Already sorted ascending by ``index``. Pairs with a missing end are
        skipped rather than raising.
    rooms : sequence of Room
        Every room on the floor; used for landmark lookup only.

    Returns
    -------
    list of PathSegment
        Empty when fewer than two anchors are supplied.
    """
    segments: List[PathSegment] = []

    for i in range(len(anchors) - 1):
        a = anchors[i]
        b = anchors[i + 1]
        if a is None or b is None:
            log.debug("Skipping anchor pair %d: missing endpoint", i)
            continue

        start, end = a.point, b.point
        distance = hypot(end.x - start.x, end.y - start.y)

        segments.append(PathSegment(
            direction=get_direction(start, end),
            steps=round_half_up(distance / STEP_PIXELS),
            nearby_rooms=tuple(nearby_rooms(start, end, rooms)),
        ))

    return segments
