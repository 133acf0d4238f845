from __future__ import annotations

import pytest
import requests

from companion.core.errors import UpstreamError
from companion.core.pipeline import submit_chat_turn
from companion.providers.chat_completion import ChatCompletionProvider
from companion.providers.web_search import WebSearchProvider

from .conftest import FakeResponse, FakeSession

TURNS = [{"role": "user", "content": "hi"}]


def _completion(session: FakeSession, api_key: str = "sk-test") -> ChatCompletionProvider:
    return ChatCompletionProvider(
        api_key=api_key,
        base_url="https://llm.invalid/v1/chat/completions",
        model="gpt-4o",
        timeout_s=3,
        max_tokens=400,
        temperature=0.7,
        session=session,
    )


def test_completion_returns_stripped_content():
    session = FakeSession(FakeResponse(200, {"choices": [{"message": {"content": "  hey!\n"}}]}))

    assert _completion(session).complete("be nice", TURNS) == "hey!"

    sent = session.requests[0]
    assert sent["timeout"] == 3
    assert sent["headers"]["Authorization"] == "Bearer sk-test"
    assert sent["json"]["model"] == "gpt-4o"
    assert sent["json"]["max_tokens"] == 400
    assert sent["json"]["messages"][0] == {"role": "system", "content": "be nice"}
    assert sent["json"]["messages"][1:] == TURNS


def test_completion_http_error_does_not_leak_provider_text():
    session = FakeSession(FakeResponse(500, text="internal stack trace: secret-key-123"))

    with pytest.raises(UpstreamError) as info:
        _completion(session).complete("sys", TURNS)

    assert "secret-key-123" not in info.value.message
    assert "500" in info.value.message


def test_completion_timeout_is_upstream_error():
    session = FakeSession(exc=requests.Timeout("slow"))

    with pytest.raises(UpstreamError):
        _completion(session).complete("sys", TURNS)


def test_completion_connection_error_is_upstream_error():
    session = FakeSession(exc=requests.ConnectionError("refused"))

    with pytest.raises(UpstreamError):
        _completion(session).complete("sys", TURNS)


@pytest.mark.parametrize(
    "body",
    [
        None,
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": "   "}}]},
    ],
)
def test_completion_malformed_body_is_upstream_error(body):
    session = FakeSession(FakeResponse(200, body))

    with pytest.raises(UpstreamError):
        _completion(session).complete("sys", TURNS)


def test_unconfigured_completion_never_calls_out():
    session = FakeSession(FakeResponse(200, {"choices": [{"message": {"content": "x"}}]}))
    provider = _completion(session, api_key="")

    assert provider.is_configured is False
    with pytest.raises(UpstreamError):
        provider.complete("sys", TURNS)
    assert session.requests == []


def _search(session: FakeSession, enabled: bool = True) -> WebSearchProvider:
    return WebSearchProvider(url="https://search.invalid/", timeout_s=2, enabled=enabled, session=session)


def test_search_prefers_abstract_text():
    session = FakeSession(FakeResponse(200, {"AbstractText": " Cats are mammals. ", "Answer": "no"}))

    assert _search(session).search("what is a cat") == "Cats are mammals."
    assert session.requests[0]["params"]["q"] == "what is a cat"
    assert session.requests[0]["timeout"] == 2


def test_search_falls_back_to_related_topics():
    topics = [{"Text": f"topic {i}"} for i in range(5)]
    session = FakeSession(FakeResponse(200, {"AbstractText": "", "RelatedTopics": topics}))

    assert _search(session).search("news") == "topic 0 | topic 1 | topic 2"


def test_search_swallows_failures():
    assert _search(FakeSession(exc=requests.Timeout("slow"))).search("news") == ""
    assert _search(FakeSession(FakeResponse(503))).search("news") == ""
    assert _search(FakeSession(FakeResponse(200, None))).search("news") == ""


def test_disabled_search_makes_no_request():
    session = FakeSession(FakeResponse(200, {"AbstractText": "x"}))

    assert _search(session, enabled=False).search("news") == ""
    assert session.requests == []


def test_search_ignores_related_topics_of_the_wrong_shape():
    for topics in (5, "text", {"Text": "x"}, None):
        session = FakeSession(FakeResponse(200, {"AbstractText": "", "RelatedTopics": topics}))
        assert _search(session).search("news") == ""


def test_chat_survives_malformed_search_response(engine, completion, now):
    engine.search = _search(FakeSession(FakeResponse(200, {"RelatedTopics": 5})))
    completion.replies = ["Here is what I know."]

    result = submit_chat_turn(engine, "amy", "latest news please", "en", now)

    assert result.reply == "Here is what I know."
