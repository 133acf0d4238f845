from __future__ import annotations

from datetime import timedelta

from companion.core.memory import MemoryStore, classify_age, is_support_turn
from companion.models.memory_model import Salience


def test_decay_boundaries(engine, now):
    engine.memory.append("alice", "seven days old", "bot7", now - timedelta(days=7))
    engine.memory.append("alice", "three days old", "bot3", now - timedelta(days=3))
    engine.memory.append("alice", "two days old", "bot2", now - timedelta(days=2))

    context = engine.memory.build_context("alice", now)

    assert [t.bot_text for t in context] == ["bot3", "bot2"]
    faded, fresh = context
    assert faded.salience is Salience.FADED
    assert faded.age_days == 3
    assert faded.user_text == "[from 3 days ago] three days old"
    assert fresh.salience is Salience.FRESH
    assert fresh.user_text == "two days old"


def test_forgotten_turns_stay_in_storage(engine, now):
    engine.memory.append("bob", "ancient", "reply", now - timedelta(days=30))

    assert engine.memory.build_context("bob", now) == []
    assert engine.memory.turn_count("bob") == 1


def test_classify_age():
    assert classify_age(0) is Salience.FRESH
    assert classify_age(2) is Salience.FRESH
    assert classify_age(3) is Salience.FADED
    assert classify_age(6) is Salience.FADED
    assert classify_age(7) is Salience.FORGOTTEN


def test_window_keeps_most_recent_entries_oldest_first(engine, now):
    for i in range(5):
        engine.memory.append("carol", f"msg {i}", f"re {i}", now - timedelta(minutes=10 - i))

    context = engine.memory.build_context("carol", now, window=2)

    assert [t.user_text for t in context] == ["msg 3", "msg 4"]


def test_window_follows_user_memory_window(engine, now):
    for i in range(40):
        engine.memory.append("dana", f"msg {i}", "ok", now)

    assert len(engine.memory.build_context("dana", now)) == 30

    engine.ledger.add_points("dana", 300)
    engine.economy.purchase("dana", "memory_boost")

    assert len(engine.memory.build_context("dana", now)) == 40


def test_forgotten_entries_are_not_replaced_by_older_ones(engine, now):
    engine.memory.append("ed", "old but fresh", "a", now - timedelta(days=1))
    engine.memory.append("ed", "newest", "b", now)

    context = engine.memory.build_context("ed", now, window=1)

    assert [t.user_text for t in context] == ["newest"]


def test_as_messages_alternates_roles(engine, now):
    engine.memory.append("fay", "hello", "hi there", now)

    messages = MemoryStore.as_messages(engine.memory.build_context("fay", now))

    assert messages == [
        {"role": "user", "content": "hello"},
        {"role": "assistant", "content": "hi there"},
    ]


def test_support_turn_detection():
    assert is_support_turn("I'm so STRESSED about exams")
    assert not is_support_turn("What a great sunny day")
    assert not is_support_turn("saddle")
