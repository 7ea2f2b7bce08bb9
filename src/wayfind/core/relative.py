"""Turn absolute segment directions into walker-relative phrases."""
from __future__ import annotations

from dataclasses import replace
from functools import reduce
from typing import List, Literal, Optional, Sequence, Tuple

from wayfind.contracts.segment_contract import Direction, PathSegment

MOVE_FORWARD = "Move forward"

_ANGLES = {"forward": 0, "right": 90, "backward": 180, "left": 270}


def direction_to_angle(direction: Direction) -> int:
    """Degrees clockwise from forward."""
    return _ANGLES.get(direction, 0)


def calculate_turn_direction(current_facing: int, target: int) -> Optional[Literal["left", "right"]]:
    """None for no turn; an exact about-face (180) resolves to right."""
    angle_diff = (target - current_facing + 360) % 360
    if angle_diff == 0:
        return None
    if angle_diff <= 180:
        return "right"
    return "left"


def _phrase(turn: Optional[str]) -> str:
    if turn is None:
        return MOVE_FORWARD
    return f"Turn {turn} and move forward"


def _step(
    acc: Tuple[int, Tuple[PathSegment, ...]], segment: PathSegment
) -> Tuple[int, Tuple[PathSegment, ...]]:
    facing, out = acc
    angle = direction_to_angle(segment.direction)
    phrase = MOVE_FORWARD if not out else _phrase(calculate_turn_direction(facing, angle))
    enriched = replace(segment, relative_direction=phrase, facing_direction=segment.direction)
    # quadratic in segment count; paths carry tens of segments at most
    return angle, (*out, enriched)


def calculate_relative_directions(segments: Sequence[PathSegment]) -> List[PathSegment]:
    """
    Enrich each segment with ``relative_direction`` and ``facing_direction``.

    The walker starts aligned with the first segment, so it always reads
    "Move forward". The facing angle is carried through the fold; the
    input segments are left untouched.
    """
    if not segments:
        return []
    initial = direction_to_angle(segments[0].direction)
    _, out = reduce(_step, segments, (initial, ()))
    return list(out)
