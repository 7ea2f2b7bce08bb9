"""Tests for SSE decoding and the streaming providers."""

import json
import threading

import pytest
import requests

from wayfind.core.engine import generate_instruction_set
from wayfind.errors import ConfigurationError, GenerationCancelled, ProviderError
from wayfind.providers.factory import build_provider
from wayfind.providers.gemini import GeminiProvider
from wayfind.providers.http import HTTPClient
from wayfind.providers.sse import extract_text_delta, iter_sse_text
from wayfind.providers.template import TemplateProvider


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"text": "a"}, "a"),
        ({"content": "b"}, "b"),
        ({"type": "text-delta", "delta": "c"}, "c"),
        ({"delta": {"text": "d"}}, "d"),
        ({"choices": [{"text": "e"}]}, "e"),
        ({"choices": [{"delta": {"content": "f"}}]}, "f"),
        ({"candidates": [{"content": {"parts": [{"text": "g"}, {"text": "h"}]}}]}, "gh"),
        ({"type": "finish-step"}, None),
        (["not", "a", "dict"], None),
    ],
)
def test_extract_text_delta(payload, expected):
    assert extract_text_delta(payload) == expected


def test_iter_sse_text_skips_noise_and_stops_at_done():
    lines = [
        ": keep-alive",
        "",
        'data: {"type": "text-delta", "delta": "SSTART\\n"}',
        "data: not json",
        'data: {"type": "finish-step"}',
        'data: {"text": "STEP: Walk"}',
        "data: [DONE]",
        'data: {"text": "after done"}',
    ]
    assert list(iter_sse_text(lines)) == ["SSTART\n", "STEP: Walk"]


class FakeStreamResponse:
    def __init__(self, lines):
        self.lines = lines
        self.encoding = None
        self.closed = False

    def iter_lines(self, decode_unicode=False):
        yield from self.lines

    def close(self):
        self.closed = True


def _gemini_lines(*texts):
    return [
        "data: " + json.dumps({"candidates": [{"content": {"parts": [{"text": t}], "role": "model"}}]})
        for t in texts
    ]


def test_gemini_streams_candidate_text(monkeypatch):
    provider = GeminiProvider(api_key="k", model="gemma-3-27b-it", base_url="https://example.test/v1beta")
    resp = FakeStreamResponse(_gemini_lines("SSTART\n", "STEP: Walk {{3}} steps\n"))
    calls = {}

    def fake_post_stream(url, payload, params=None, timeout_s=None):
        calls.update(url=url, payload=payload, params=params)
        return resp

    monkeypatch.setattr(provider.http, "post_stream", fake_post_stream)

    assert list(provider.stream_text("PROMPT")) == ["SSTART\n", "STEP: Walk {{3}} steps\n"]
    assert calls["url"] == "https://example.test/v1beta/models/gemma-3-27b-it:streamGenerateContent"
    assert calls["params"] == {"alt": "sse", "key": "k"}
    assert calls["payload"]["contents"][0]["parts"][0]["text"] == "PROMPT"
    assert resp.closed
    assert resp.encoding == "utf-8"


def test_gemini_cancel_closes_response(monkeypatch):
    provider = GeminiProvider(api_key="k")
    resp = FakeStreamResponse(_gemini_lines("one", "two"))
    monkeypatch.setattr(provider.http, "post_stream", lambda *a, **kw: resp)
    cancel = threading.Event()

    stream = provider.stream_text("PROMPT", cancel=cancel)
    assert next(stream) == "one"
    cancel.set()
    with pytest.raises(GenerationCancelled):
        next(stream)
    assert resp.closed


class BrokenStreamResponse(FakeStreamResponse):
    def iter_lines(self, decode_unicode=False):
        yield from self.lines
        raise requests.exceptions.ChunkedEncodingError("connection reset mid-stream")


def test_gemini_mid_stream_disconnect_is_a_provider_error(monkeypatch, e2e_path):
    provider = GeminiProvider(api_key="k")
    resp = BrokenStreamResponse(_gemini_lines("SSTART\n"))
    monkeypatch.setattr(provider.http, "post_stream", lambda *a, **kw: resp)

    with pytest.raises(ProviderError) as exc:
        generate_instruction_set(e2e_path, [], provider)
    assert isinstance(exc.value.__cause__, requests.exceptions.ChunkedEncodingError)
    assert resp.closed


def test_gemini_requires_api_key():
    with pytest.raises(ConfigurationError):
        next(GeminiProvider(api_key="").stream_text("PROMPT"))


def test_http_error_status_becomes_provider_error(monkeypatch):
    client = HTTPClient(user_agent="test", tries=1, backoff_s=0)

    class _Resp:
        status_code = 429
        closed = False

        def raise_for_status(self):
            raise requests.HTTPError(response=self)

        def close(self):
            _Resp.closed = True

    monkeypatch.setattr(client.s, "post", lambda *a, **kw: _Resp())
    with pytest.raises(ProviderError) as exc:
        client.post_stream("https://example.test/x", {})
    assert "429" in exc.value.message
    assert _Resp.closed


def test_connection_errors_are_retried_then_raised(monkeypatch):
    client = HTTPClient(user_agent="test", tries=2, backoff_s=0)
    attempts = []

    def boom(*a, **kw):
        attempts.append(1)
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(client.s, "post", boom)
    with pytest.raises(ProviderError):
        client.post_stream("https://example.test/x", {})
    assert len(attempts) == 2


def test_build_provider():
    assert isinstance(build_provider("template"), TemplateProvider)
    assert isinstance(build_provider("gemini"), GeminiProvider)
    with pytest.raises(ValueError):
        build_provider("carrier-pigeon")


def test_invalid_url_is_not_retried(monkeypatch):
    client = HTTPClient(user_agent="test", tries=3, backoff_s=0)
    attempts = []

    def bad_url(*a, **kw):
        attempts.append(1)
        raise requests.exceptions.InvalidURL("no host supplied")

    monkeypatch.setattr(client.s, "post", bad_url)
    with pytest.raises(ProviderError):
        client.post_stream("https:///x", {})
    assert len(attempts) == 1
