"""Prompt construction for the generative text service.

The delimiters and the ``{{N}}`` step marker form the wire contract with
the model output; ``wayfind.core.parser`` reads them back.
"""
from __future__ import annotations

from typing import List, Sequence

from wayfind.contracts.segment_contract import PathSegment
from wayfind.core.models import RoomRef

STEPS_START = "SSTART"
STEPS_END = "SEND"
STEP_MARKER = "STEP:"
CONCISE_START = "C:"
CONCISE_END = "EC"


def step_marker(steps: int) -> str:
    return "{{" + str(steps) + "}}"


def format_segment_line(n: int, segment: PathSegment, with_rooms: bool = False) -> str:
    line = f"{n}. {segment.relative_direction} {step_marker(segment.steps)} steps"
    if with_rooms and segment.nearby_rooms:
        line += f" (near {', '.join(segment.nearby_rooms)})"
    return line


def build_concise_instructions(segments: Sequence[PathSegment]) -> List[str]:
    return [format_segment_line(i + 1, s) for i, s in enumerate(segments)]


def build_prompt(from_room: RoomRef, to_room: RoomRef, segments: Sequence[PathSegment]) -> str:
    movement = "\n".join(
        format_segment_line(i + 1, s, with_rooms=True) for i, s in enumerate(segments)
    )
    concise = "\n".join(build_concise_instructions(segments))

    return f"""Generate navigation instructions for a visually impaired person.

PATH INFORMATION:
From: {from_room.label}
To: {to_room.label}

MOVEMENT SEGMENTS:
{movement}

Be creative with your sentence structure and wording. Use varied, natural language instead of repeating the same phrases. Make the instructions engaging and easy to follow.

IMPORTANT: Use {{{{step_number}}}} format for ALL step counts in your response.

Return response using these exact delimiters and also respond things after STEPS_END as it is:
{STEPS_START}
{STEP_MARKER} [step 1: full sentence using {{{{step_number}}}} format, e.g., "Walk forward {{{{8}}}} steps"]
{STEP_MARKER} [step 2: full sentence using {{{{step_number}}}} format, e.g., "Turn right and walk forward {{{{27}}}} steps"]
{STEP_MARKER} [step 3: full sentence using {{{{step_number}}}} format, e.g., "Move backward {{{{4}}}} steps to reach your destination"]
{STEPS_END}
{CONCISE_START}
{concise}
{CONCISE_END}
"""


# ---------------------------------------------------------------------------
# Deterministic fallback: same wire format, no model involved
# ---------------------------------------------------------------------------

def _template_sentence(segment: PathSegment, is_last: bool) -> str:
    phrase = (segment.relative_direction or "Move forward").replace("move forward", "walk forward")
    if phrase == "Move forward":
        phrase = "Walk forward"
    sentence = f"{phrase} {step_marker(segment.steps)} steps"
    if segment.nearby_rooms:
        sentence += f", passing {' and '.join(segment.nearby_rooms)}"
    if is_last:
        sentence += " to reach your destination"
    return sentence + "."


def render_template_completion(segments: Sequence[PathSegment]) -> str:
    """Completion text in the model's output format, built from templates."""
    lines = [STEPS_START]
    for i, seg in enumerate(segments):
        lines.append(f"{STEP_MARKER} {_template_sentence(seg, i == len(segments) - 1)}")
    lines.append(STEPS_END)
    lines.append(CONCISE_START)
    lines.extend(build_concise_instructions(segments))
    lines.append(CONCISE_END)
    return "\n".join(lines) + "\n"
