from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Iterator, Optional

import requests

from wayfind.config import settings
from wayfind.errors import ConfigurationError, GenerationCancelled, ProviderError
from wayfind.providers.base import GenerationProvider
from wayfind.providers.http import HTTPClient
from wayfind.providers.sse import iter_sse_text

log = logging.getLogger(__name__)


@dataclass
class GeminiProvider(GenerationProvider):
    """
    Google Generative Language API, streamed as server-sent events.

    The read is cancellable: setting *cancel* closes the connection and
    raises GenerationCancelled before the next delta is handed out.
    """

    api_key: str = field(default_factory=lambda: settings.gemini_api_key)
    model: str = field(default_factory=lambda: settings.gemini_model)
    base_url: str = field(default_factory=lambda: settings.gemini_base_url)
    user_agent: str = "wayfind (indoor navigation instructions)"
    name: str = "gemini"

    def __post_init__(self) -> None:
        self.http = HTTPClient(
            user_agent=self.user_agent,
            timeout_s=settings.http_timeout_s,
            tries=settings.http_tries,
            backoff_s=settings.http_backoff_s,
        )

    def _url(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:streamGenerateContent"

    def stream_text(self, prompt: str, cancel: Optional[threading.Event] = None) -> Iterator[str]:
        if not self.api_key:
            raise ConfigurationError("Gemini API key missing; set WAYFIND_GEMINI_API_KEY")

        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        resp = self.http.post_stream(self._url(), payload, params={"alt": "sse", "key": self.api_key})
        log.info("Streaming completion from %s", self.model)
        try:
            for delta in iter_sse_text(HTTPClient.iter_lines(resp)):
                if cancel is not None and cancel.is_set():
                    raise GenerationCancelled("Generation cancelled by caller")
                yield delta
        except requests.RequestException as e:
            raise ProviderError("Generation stream interrupted", {"model": self.model}) from e
        finally:
            resp.close()
