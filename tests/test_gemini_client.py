from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest

from stock_analyst.analysis.errors import EmptyResponseError, TransportError
from stock_analyst.infrastructure.llm.gemini_client import GeminiClient


def _annotation(title, url):
    return SimpleNamespace(type="url_citation", url_citation=SimpleNamespace(title=title, url=url))


def _response(content, annotations=None):
    message = SimpleNamespace(content=content, annotations=annotations)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class _Completions:
    def __init__(self, result):
        self.result = result
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def _client_with(result, **kwargs):
    client = GeminiClient(api_key="test-key", model="gemini-test", **kwargs)
    completions = _Completions(result)
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return client, completions


def test_requires_api_key():
    with pytest.raises(ValueError, match="POE_API_KEY"):
        GeminiClient(api_key="", model="gemini-test")


def test_grounded_reply_collects_url_citations():
    annotations = [
        _annotation("Yahoo", "https://y"),
        SimpleNamespace(type="file_citation"),
        _annotation(None, "https://n"),
    ]
    client, completions = _client_with(_response("```json\n{}\n```", annotations), default_web_search=True)

    reply = client.generate_grounded([{"role": "user", "content": "hi"}])
    client.close()

    assert reply.text.startswith("```json")
    assert reply.citations == [
        {"web": {"title": "Yahoo", "uri": "https://y"}},
        {"web": {"title": None, "uri": "https://n"}},
    ]
    assert completions.kwargs["model"] == "gemini-test"
    assert completions.kwargs["extra_body"] == {"web_search": True}


def test_call_overrides_beat_defaults():
    client, completions = _client_with(_response("ok"), default_web_search=False, default_thinking_budget=512)
    reply = client.generate_grounded([{"role": "user", "content": "hi"}], web_search=True, thinking_budget=1024)
    assert reply.text == "ok"
    assert completions.kwargs["extra_body"] == {"web_search": True, "thinking_budget": 1024}


def test_no_extra_body_when_nothing_configured():
    client, completions = _client_with(_response("ok"))
    client.generate_grounded([{"role": "user", "content": "hi"}])
    assert completions.kwargs["extra_body"] is None


def test_missing_annotations_yield_no_citations():
    client, _ = _client_with(_response("text", annotations=None))
    assert client.generate_grounded([]).citations == []


@pytest.mark.parametrize(
    "response",
    [SimpleNamespace(choices=[]), _response(None), _response("   ")],
)
def test_empty_replies_raise(response):
    client, _ = _client_with(response)
    with pytest.raises(EmptyResponseError):
        client.generate_grounded([{"role": "user", "content": "hi"}])


def test_transport_failures_keep_message_and_cause():
    request = httpx.Request("POST", "https://api.poe.com/v1/chat/completions")
    failure = openai.APIConnectionError(message="Connection refused", request=request)
    client, _ = _client_with(failure)

    with pytest.raises(TransportError, match="Connection refused") as excinfo:
        client.generate_grounded([{"role": "user", "content": "hi"}])
    assert excinfo.value.__cause__ is failure


def test_httpx_failures_become_transport_errors():
    request = httpx.Request("POST", "https://api.poe.com/v1/chat/completions")
    failure = httpx.ConnectError("Name or service not known", request=request)
    client, _ = _client_with(failure)

    with pytest.raises(TransportError, match="Name or service not known") as excinfo:
        client.generate_grounded([{"role": "user", "content": "hi"}])
    assert excinfo.value.__cause__ is failure
