from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from wayfind.contracts.segment_contract import PathSegment
from wayfind.core.models import InstructionSet, PathRecord, Room
from wayfind.core.parser import StreamAccumulator
from wayfind.core.prompt import build_concise_instructions, build_prompt
from wayfind.core.relative import calculate_relative_directions
from wayfind.core.segments import calculate_path_segments
from wayfind.errors import GenerationCancelled, GenerationFailed
from wayfind.providers.base import GenerationProvider

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedPath:
    path_id: str
    segments: List[PathSegment]
    concise_instructions: List[str]
    prompt: str


@dataclass(frozen=True)
class StreamProgress:
    descriptive_steps: int
    concise_instructions: int
    total_segments: int


ProgressCallback = Callable[[str, StreamProgress], None]


def prepare_path(path: PathRecord, rooms: Sequence[Room]) -> PreparedPath:
    """Segment, relativize and format a path; no I/O."""
    segments = calculate_relative_directions(
        calculate_path_segments(path.sorted_anchors(), rooms)
    )
    return PreparedPath(
        path_id=path.path_id,
        segments=segments,
        concise_instructions=build_concise_instructions(segments),
        prompt=build_prompt(path.from_room, path.to_room, segments),
    )


def generate_instruction_set(
    path: PathRecord,
    rooms: Sequence[Room],
    provider: GenerationProvider,
    on_progress: Optional[ProgressCallback] = None,
    cancel: Optional[threading.Event] = None,
) -> InstructionSet:
    """
    Stream a completion for *path* and parse it into an InstructionSet.

    Each growing prefix is re-parsed so *on_progress* sees counts rise as
    lines arrive. Raises GenerationCancelled if *cancel* is set mid-stream
    and GenerationFailed if the finished stream holds no STEP lines.
    """
    prepared = prepare_path(path, rooms)
    acc = StreamAccumulator()

    for delta in provider.stream_text(prepared.prompt, cancel=cancel):
        if cancel is not None and cancel.is_set():
            raise GenerationCancelled("Generation cancelled by caller", {"path_id": path.path_id})
        parsed = acc.feed(delta)
        if on_progress is not None:
            on_progress(path.path_id, StreamProgress(
                descriptive_steps=len(parsed.steps),
                concise_instructions=len(parsed.concise_instructions),
                total_segments=path.total_segments,
            ))

    parsed = acc.finish()
    if not parsed.steps:
        log.error("No instructions generated for path %s", path.path_id)
        raise GenerationFailed("No instructions generated", {"path_id": path.path_id})

    return InstructionSet(
        path_id=path.path_id,
        descriptive_instructions=parsed.steps,
        concise_instructions=parsed.concise_instructions or prepared.concise_instructions,
    )
