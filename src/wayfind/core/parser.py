"""Incremental parser for the delimited completion stream.

``parse_completion`` is re-run on the whole accumulated buffer after every
chunk. Lines still waiting for their newline are held back, so a longer
prefix only ever adds entries.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from wayfind.core.prompt import CONCISE_END, CONCISE_START, STEP_MARKER, STEPS_END, STEPS_START

_STEPS_START_RE = re.compile(rf"{re.escape(STEPS_START)}[ \t]*\r?\n")
_STEPS_END_RE = re.compile(rf"^{re.escape(STEPS_END)}[ \t]*\r?$", re.MULTILINE)
_CONCISE_START_RE = re.compile(rf"^{re.escape(CONCISE_START)}[ \t]*\r?\n", re.MULTILINE)
_CONCISE_END_RE = re.compile(rf"^{re.escape(CONCISE_END)}[ \t]*\r?$", re.MULTILINE)


@dataclass
class ParsedCompletion:
    steps: List[str] = field(default_factory=list)
    concise_instructions: List[str] = field(default_factory=list)


def _extract_block(
    text: str, start_re: re.Pattern, end_re: re.Pattern, pos: int = 0
) -> Tuple[Optional[str], int]:
    """
    Return (block, end_pos). ``block`` is None when the start delimiter has
    not arrived yet. Without an end delimiter the block runs to the last
    complete line of the buffer.
    """
    start = start_re.search(text, pos)
    if start is None:
        return None, pos

    end = end_re.search(text, start.end())
    if end is not None:
        return text[start.end():end.start()], end.end()

    body = text[start.end():]
    return body[: body.rfind("\n") + 1], len(text)


def parse_completion(text: str) -> ParsedCompletion:
    steps_block, steps_end = _extract_block(text, _STEPS_START_RE, _STEPS_END_RE)
    steps: List[str] = []
    if steps_block:
        steps = [
            line[len(STEP_MARKER):].strip()
            for line in steps_block.split("\n")
            if line.startswith(STEP_MARKER)
        ]

    concise_block, _ = _extract_block(text, _CONCISE_START_RE, _CONCISE_END_RE, steps_end)
    concise: List[str] = []
    if concise_block:
        concise = [line.strip() for line in concise_block.split("\n") if line.strip()]

    return ParsedCompletion(steps=steps, concise_instructions=concise)


class StreamAccumulator:
    """Collects streamed deltas and exposes the parse of everything seen so far."""

    def __init__(self) -> None:
        self._chunks: List[str] = []
        self.parsed = ParsedCompletion()

    @property
    def text(self) -> str:
        return "".join(self._chunks)

    def feed(self, delta: str) -> ParsedCompletion:
        if delta:
            self._chunks.append(delta)
            self.parsed = parse_completion(self.text)
        return self.parsed

    def finish(self) -> ParsedCompletion:
        """End of stream: flush a trailing line that never got its newline."""
        if self._chunks and not self.text.endswith("\n"):
            return self.feed("\n")
        return self.parsed
