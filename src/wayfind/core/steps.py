"""Display-time step rescaling for a user's stride preference.

Stored instructions always carry medium-stride counts inside a ``{{N}}``
marker; the adjustment is re-applied on every render and never persisted.
"""
from __future__ import annotations

import re
from typing import Dict, Optional

from wayfind.core.models import InstructionSet, StepSize
from wayfind.core.segments import round_half_up

STEP_MULTIPLIERS: Dict[StepSize, float] = {
    StepSize.SMALL: 1.4,   # short strides need more steps
    StepSize.MEDIUM: 1.0,
    StepSize.LARGE: 0.7,
}

_MARKER_RE = re.compile(r"\{\{(\d+)\}\}")
_STRAY_BRACES_RE = re.compile(r"[{}]")


def extract_step_count(text: str) -> Optional[int]:
    m = _MARKER_RE.search(text)
    return int(m.group(1)) if m else None


def adjust_steps(text: str, step_size: StepSize) -> str:
    """Rescale the first ``{{N}}`` marker and render it as a plain number."""
    m = _MARKER_RE.search(text)
    if m is None:
        return text

    adjusted = round_half_up(int(m.group(1)) * STEP_MULTIPLIERS[StepSize(step_size)])
    out = text[: m.start()] + str(adjusted) + text[m.end():]
    return _STRAY_BRACES_RE.sub("", out)


def adjust_instruction_set(instruction_set: InstructionSet, step_size: StepSize) -> InstructionSet:
    """Copy of *instruction_set* with every line adjusted for display."""
    return InstructionSet(
        path_id=instruction_set.path_id,
        descriptive_instructions=[adjust_steps(t, step_size) for t in instruction_set.descriptive_instructions],
        concise_instructions=[adjust_steps(t, step_size) for t in instruction_set.concise_instructions],
    )
