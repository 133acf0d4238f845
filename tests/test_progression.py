from __future__ import annotations

import random
from datetime import timedelta

import pytest

from companion.core.errors import ValidationError
from companion.core.progression import (
    EMPATHY_BADGE,
    LEVEL_UP_BONUS,
    MARATHON_BADGE,
    MAX_BASE_POINTS,
    streak_multiplier,
    xp_threshold,
)


def expected_multiplier(streak: int) -> int:
    if streak < 3:
        return 1
    if streak < 7:
        return 2
    return 10


def test_first_activity_creates_user_with_streak_one(engine, now):
    result = engine.ledger.record_activity("alice", 10, now)

    user = engine.ledger.get_profile("alice")
    assert result.award == 10
    assert result.multiplier == 1
    assert user.streak == 1
    assert user.points == 10
    assert user.xp == 10
    assert user.level == 1
    assert user.last_activity_at == now


def test_consecutive_days_build_streak_and_multiplier(engine, now):
    for n in range(1, 11):
        result = engine.ledger.record_activity("bob", 10, now + timedelta(days=n - 1))
        assert result.streak == n
        assert result.multiplier == expected_multiplier(n)
        assert result.award == 10 * expected_multiplier(n)


def test_multiplier_is_compounding():
    assert [streak_multiplier(s) for s in (0, 1, 2, 3, 6, 7, 30)] == [1, 1, 1, 2, 2, 10, 10]


def test_gap_longer_than_a_day_restarts_streak(engine, now):
    engine.ledger.record_activity("carol", 10, now)
    engine.ledger.record_activity("carol", 10, now + timedelta(days=1))
    assert engine.ledger.get_profile("carol").streak == 2

    result = engine.ledger.record_activity("carol", 10, now + timedelta(days=4))
    assert result.streak == 1
    assert result.multiplier == 1


def test_same_day_activity_keeps_streak(engine, now):
    engine.ledger.record_activity("dave", 10, now)
    engine.ledger.record_activity("dave", 10, now + timedelta(days=1))
    result = engine.ledger.record_activity("dave", 10, now + timedelta(days=1, hours=3))
    assert result.streak == 2


def test_streak_uses_utc_calendar_days(engine, now):
    late = now.replace(hour=23, minute=59)
    engine.ledger.record_activity("erin", 10, late)
    result = engine.ledger.record_activity("erin", 10, late + timedelta(minutes=2))
    assert result.streak == 2


def test_award_spanning_several_levels(engine, now):
    result = engine.ledger.record_activity("frank", 2000, now)

    user = engine.ledger.get_profile("frank")
    # 2000 - 500 (level 1) - 1000 (level 2) = 500 left at level 3
    assert user.level == 3
    assert user.xp == 500
    assert user.points == 2000 + 2 * LEVEL_UP_BONUS
    assert result.new_badges == ["Level 2 Reached", "Level 3 Reached"]


def test_xp_invariant_holds_for_any_award_sequence(engine, now):
    rng = random.Random(1234)
    moment = now
    for _ in range(200):
        moment += timedelta(hours=rng.choice([1, 20, 30, 80]))
        engine.ledger.record_activity("gina", rng.randint(0, 3000), moment)
        user = engine.ledger.get_profile("gina")
        assert 0 <= user.xp < xp_threshold(user.level)
        assert user.level >= 1
        assert user.points >= 0


@pytest.mark.parametrize("bad", [-1, "10", None, True, float("nan"), float("inf")])
def test_invalid_base_points_rejected_without_side_effects(engine, now, bad):
    with pytest.raises(ValidationError):
        engine.ledger.record_activity("hank", bad, now)
    assert engine.store.get_user("hank") is None


def test_oversized_base_points_rejected_on_a_long_streak(engine, now):
    for day in range(2):
        engine.ledger.record_activity("zed", 0, now + timedelta(days=day))
    before = engine.ledger.get_profile("zed")

    with pytest.raises(ValidationError):
        engine.ledger.record_activity("zed", 1e308, now + timedelta(days=2))
    with pytest.raises(ValidationError):
        engine.ledger.record_activity("zed", MAX_BASE_POINTS + 1, now + timedelta(days=2))

    assert engine.ledger.get_profile("zed") == before


def test_largest_base_award_completes_on_max_multiplier(engine, now):
    for day in range(6):
        engine.ledger.record_activity("max", 0, now + timedelta(days=day))

    result = engine.ledger.record_activity("max", MAX_BASE_POINTS, now + timedelta(days=6))

    assert result.multiplier == 10
    assert result.award == MAX_BASE_POINTS * 10
    user = engine.ledger.get_profile("max")
    assert 0 <= user.xp < xp_threshold(user.level)


def test_zero_points_still_counts_for_streak(engine, now):
    result = engine.ledger.record_activity("ivy", 0, now)
    assert result.award == 0
    assert result.streak == 1


def test_marathon_badge_issued_once(engine, now):
    for i in range(50):
        engine.memory.append("jack", f"message {i}", "ok", now)

    first = engine.ledger.record_activity("jack", 1, now)
    second = engine.ledger.record_activity("jack", 1, now)

    assert MARATHON_BADGE in first.new_badges
    assert MARATHON_BADGE not in second.new_badges
    assert engine.ledger.get_profile("jack").badges.count(MARATHON_BADGE) == 1


def test_empathy_badge_needs_ten_support_turns(engine, now):
    for i in range(9):
        engine.memory.append("kate", "I feel so anxious today", "I'm here.", now)
    engine.memory.append("kate", "just chatting", "sure", now)

    assert EMPATHY_BADGE not in engine.ledger.record_activity("kate", 1, now).new_badges

    engine.memory.append("kate", "Feeling lonely again", "I'm with you.", now)
    assert EMPATHY_BADGE in engine.ledger.record_activity("kate", 1, now).new_badges


def test_add_points_only_touches_points(engine):
    user = engine.ledger.add_points("liam", 45)

    assert user.points == 45
    assert user.xp == 0
    assert user.streak == 0
    assert user.last_activity_at is None


@pytest.mark.parametrize("bad", [0, -5, True])
def test_add_points_rejects_non_positive(engine, bad):
    with pytest.raises(ValidationError):
        engine.ledger.add_points("mia", bad)
