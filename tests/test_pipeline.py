from __future__ import annotations

from datetime import timedelta

import pytest

from companion.core.errors import ValidationError
from companion.core.pipeline import FALLBACK_REPLY, submit_chat_turn, wants_search


def test_successful_turn_records_memory_points_and_leaderboard(engine, completion, now):
    completion.replies = ["Glad you're here!"]

    result = submit_chat_turn(engine, "alice", "  hello\n there ", "en", now)

    assert result.reply == "Glad you're here!"
    assert result.activity.award == 10
    assert engine.memory.turn_count("alice") == 1
    assert engine.memory.build_context("alice", now)[0].user_text == "hello there"
    assert engine.ledger.get_profile("alice").points == 10
    assert [e.user_id for e in engine.leaderboard.read()] == ["alice"]


def test_context_is_sent_before_the_new_message(engine, completion, now):
    engine.memory.append("bob", "I adopted a cat", "How lovely!", now - timedelta(days=4))

    submit_chat_turn(engine, "bob", "She is sleeping", "en", now)

    system_prompt, turns = completion.calls[0]
    assert "Language: en" in system_prompt
    assert turns == [
        {"role": "user", "content": "[from 4 days ago] I adopted a cat"},
        {"role": "assistant", "content": "How lovely!"},
        {"role": "user", "content": "She is sleeping"},
    ]


def test_upstream_failure_returns_fallback_and_changes_nothing(engine, completion, now):
    completion.fail = True

    result = submit_chat_turn(engine, "carol", "hi", "en", now)

    assert result.reply == FALLBACK_REPLY
    assert result.upstream_failed is True
    assert result.activity is None
    assert engine.memory.turn_count("carol") == 0
    assert engine.store.get_user("carol") is None
    assert engine.leaderboard.read() == []


def test_mock_mode_without_api_key(engine, completion, now):
    completion.is_configured = False

    result = submit_chat_turn(engine, "dave", "ping", "en", now)

    assert result.reply == 'AI (mock): I heard: "ping"'
    assert completion.calls == []
    assert engine.memory.turn_count("dave") == 0


def test_empty_message_is_rejected(engine, now):
    with pytest.raises(ValidationError):
        submit_chat_turn(engine, "erin", " \x00 \n ", "en", now)


def test_search_snippet_goes_into_system_prompt(engine, completion, search, now):
    search.text = "Rain expected in the afternoon."

    submit_chat_turn(engine, "fay", "What is the latest weather news?", "en", now)

    assert search.queries == ["What is the latest weather news?"]
    assert "Rain expected in the afternoon." in completion.calls[0][0]


def test_plain_chat_skips_search(engine, search, now):
    submit_chat_turn(engine, "gus", "I feel calm tonight", "en", now)
    assert search.queries == []


def test_wants_search():
    assert wants_search("Can you look up the opening hours?")
    assert not wants_search("good morning")
