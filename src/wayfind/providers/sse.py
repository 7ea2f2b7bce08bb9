"""Server-sent-event decoding for text-generation streams.

Different backends wrap the text delta differently; ``extract_text_delta``
accepts every shape we have seen in the wild.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Iterator, Optional

log = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE = "[DONE]"


def extract_text_delta(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None

    if isinstance(payload.get("text"), str):
        return payload["text"]
    if isinstance(payload.get("content"), str):
        return payload["content"]

    delta = payload.get("delta")
    if payload.get("type") == "text-delta" and isinstance(delta, str):
        return delta
    if isinstance(delta, dict) and isinstance(delta.get("text"), str):
        return delta["text"]

    choices = payload.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        first = choices[0]
        if isinstance(first.get("text"), str):
            return first["text"]
        cdelta = first.get("delta")
        if isinstance(cdelta, dict) and isinstance(cdelta.get("content"), str):
            return cdelta["content"]

    # Google Generative Language: candidates[0].content.parts[*].text
    candidates = payload.get("candidates")
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
        parts = (candidates[0].get("content") or {}).get("parts") or []
        texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
        if texts:
            return "".join(texts)

    return None


def iter_sse_text(lines: Iterable[str]) -> Iterator[str]:
    """Yield text deltas from raw SSE lines until ``[DONE]`` or the lines run out."""
    for line in lines:
        if not line.startswith(DATA_PREFIX):
            continue
        data = line[len(DATA_PREFIX):]
        if data.strip() == DONE:
            return
        try:
            payload = json.loads(data)
        except ValueError:
            log.debug("Ignoring non-JSON SSE data line: %.80s", data)
            continue
        text = extract_text_delta(payload)
        if text:
            yield text
