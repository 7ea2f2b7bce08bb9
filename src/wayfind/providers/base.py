from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Iterator, Optional


class GenerationProvider(ABC):
    """Stream generated text for a prompt, one delta at a time."""

    name: str = "base"

    @abstractmethod
    def stream_text(self, prompt: str, cancel: Optional[threading.Event] = None) -> Iterator[str]:
        raise NotImplementedError
