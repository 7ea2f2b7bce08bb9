"""Redis key naming conventions for the wayfind store."""
from __future__ import annotations

_PREFIX = "wf"


# ── Instruction sets ─────────────────────────────────────────────────────

def instruction_set(path_id: str) -> str:
    """Key for the generated InstructionSet of one path."""
    return f"{_PREFIX}:instructions:{path_id}"


# ── User settings ────────────────────────────────────────────────────────

def user_step_size(user_id: str) -> str:
    return f"{_PREFIX}:settings:step_size:{user_id}"
