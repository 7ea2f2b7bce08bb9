from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

import requests
from requests.exceptions import ConnectionError, HTTPError, ReadTimeout, RequestException

from wayfind.errors import ProviderError


@dataclass
class HTTPClient:
    user_agent: str
    timeout_s: int = 60
    tries: int = 3
    backoff_s: float = 0.8

    def __post_init__(self) -> None:
        self.s = requests.Session()
        self.s.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept": "text/event-stream, application/json;q=0.9, */*;q=0.8",
            }
        )

    def post_stream(
        self,
        url: str,
        payload: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
        timeout_s: Optional[int] = None,
    ) -> requests.Response:
        """
        POST and return the open streaming response.

        Only connecting is retried; once bytes start flowing the caller owns
        the response and must close it.
        """
        timeout = timeout_s if timeout_s is not None else self.timeout_s
        last_err: Optional[Exception] = None
        for attempt in range(self.tries):
            try:
                r = self.s.post(url, json=payload, params=params, timeout=timeout, stream=True)
                r.raise_for_status()
                return r
            except HTTPError as e:
                if e.response is not None:
                    e.response.close()
                status = e.response.status_code if e.response is not None else None
                raise ProviderError(f"Generation service returned HTTP {status}", {"url": url}) from e
            except (ReadTimeout, ConnectionError) as e:
                last_err = e
                time.sleep(self.backoff_s * (2**attempt))
            except RequestException as e:
                raise ProviderError(f"Generation request failed: {e}", {"url": url}) from e
        raise ProviderError(f"Generation service unreachable: {last_err}", {"url": url})

    @staticmethod
    def iter_lines(response: requests.Response) -> Iterator[str]:
        if response.encoding is None:
            response.encoding = "utf-8"
        for line in response.iter_lines(decode_unicode=True):
            if line is not None:
                yield line
