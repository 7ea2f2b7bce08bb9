from __future__ import annotations

import re
import threading
from typing import Iterator, List, Optional

from wayfind.contracts.segment_contract import PathSegment
from wayfind.core.prompt import render_template_completion
from wayfind.errors import GenerationCancelled
from wayfind.providers.base import GenerationProvider

_SEGMENT_LINE_RE = re.compile(
    r"^\d+\. (?P<phrase>.+?) \{\{(?P<steps>\d+)\}\} steps(?: \(near (?P<rooms>.+)\))?$"
)


def _segments_from_prompt(prompt: str) -> List[PathSegment]:
    """Recover the relativized segments from the MOVEMENT SEGMENTS block."""
    _, _, rest = prompt.partition("MOVEMENT SEGMENTS:\n")
    block, _, _ = rest.partition("\n\n")

    out: List[PathSegment] = []
    for line in block.splitlines():
        m = _SEGMENT_LINE_RE.match(line.strip())
        if not m:
            continue
        rooms = tuple(r.strip() for r in m.group("rooms").split(",")) if m.group("rooms") else ()
        out.append(PathSegment(
            direction="forward",  # unused by the templates
            steps=int(m.group("steps")),
            nearby_rooms=rooms,
            relative_direction=m.group("phrase"),
        ))
    return out


class TemplateProvider(GenerationProvider):
    """
    Deterministic offline stand-in for the model.

    Rebuilds the segments from the prompt and streams a templated
    completion in the same delimited format, in small chunks, so the
    streaming path runs end-to-end without an API key.
    """

    name = "template"

    def __init__(self, chunk_size: int = 24):
        self.chunk_size = max(1, chunk_size)

    def stream_text(self, prompt: str, cancel: Optional[threading.Event] = None) -> Iterator[str]:
        segments = _segments_from_prompt(prompt)
        if not segments:
            return
        text = render_template_completion(segments)
        for i in range(0, len(text), self.chunk_size):
            if cancel is not None and cancel.is_set():
                raise GenerationCancelled("Generation cancelled by caller")
            yield text[i:i + self.chunk_size]
