# companion/core/progression.py
# -*- coding: utf-8 -*-
"""
Companion Server — ProgressionLedger
------------------------------------
Per-user points / xp / level / streak / badge state machine.

record_activity(user_id, base_points, now):

1. Streak (UTC calendar days since last activity):
       no prior activity -> 1
       same day          -> unchanged
       exactly 1 day     -> +1
       more than 1 day   -> reset to 0, then 1 for this activity
2. award = base_points * multiplier(streak)
       multiplier is compounding: x2 from streak 3, a further x5 from
       streak 7, i.e. 1 / 2 / 10.
3. points += award, xp += award
4. while xp >= xp_threshold(level): xp -= threshold, level += 1,
   badge "Level {level} Reached", points += LEVEL_UP_BONUS
   with xp_threshold(level) = level * 500.
5. One-off badges: "Marathon Talker" (>= 50 turns),
   "Empathy Expert" (>= 10 support turns).

Every change to a user happens on a working copy under the "user:<id>" lock
and is committed only if the whole operation finished.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from companion.core import clock
from companion.core.errors import ValidationError
from companion.core.memory import MemoryStore
from companion.core.types import ActivityResult
from companion.models.user_model import UserProfile
from companion.runtime_state import StateStore

logger = logging.getLogger(__name__)

XP_PER_LEVEL: int = 500
LEVEL_UP_BONUS: int = 50

STREAK_DOUBLE_AT: int = 3
STREAK_QUINTUPLE_AT: int = 7

# Largest base award a single activity may carry (before the streak multiplier).
MAX_BASE_POINTS: int = 1_000_000

MARATHON_BADGE = "Marathon Talker"
MARATHON_TURNS = 50
EMPATHY_BADGE = "Empathy Expert"
EMPATHY_TURNS = 10


def xp_threshold(level: int) -> int:
    return level * XP_PER_LEVEL


def streak_multiplier(streak: int) -> int:
    multiplier = 1
    if streak >= STREAK_DOUBLE_AT:
        multiplier *= 2
    if streak >= STREAK_QUINTUPLE_AT:
        multiplier *= 5
    return multiplier


def level_badge(level: int) -> str:
    return f"Level {level} Reached"


def next_streak(user: UserProfile, now: datetime) -> int:
    if user.last_activity_at is None:
        return 1
    gap = clock.days_between(user.last_activity_at, now)
    if gap == 1:
        return user.streak + 1
    if gap > 1:
        # Broken streak resets to 0; this activity starts a new one.
        return 1
    # Same day (or a clock that went backwards): keep the current streak.
    return max(user.streak, 1)


def _check_base_points(base_points: object) -> float:
    if isinstance(base_points, bool) or not isinstance(base_points, (int, float)):
        raise ValidationError("base_points must be a number")
    if not math.isfinite(base_points) or base_points < 0:
        raise ValidationError("base_points must be a non-negative finite number")
    if base_points > MAX_BASE_POINTS:
        raise ValidationError(f"base_points must not exceed {MAX_BASE_POINTS}")
    return base_points


class ProgressionLedger:
    """Owns the "user:<user_id>" slice of the datastore."""

    def __init__(
        self,
        store: StateStore,
        memory: MemoryStore,
        default_memory_window: int = 30,
    ) -> None:
        self.store = store
        self.memory = memory
        self.default_memory_window = default_memory_window

    # ------------------------------------------------------------------
    # User access
    # ------------------------------------------------------------------

    def _new_user(self, user_id: str) -> UserProfile:
        return UserProfile(user_id=user_id, memory_window=self.default_memory_window)

    def get_profile(self, user_id: str) -> UserProfile:
        """Stored profile, or zero defaults for a user that has done nothing yet."""
        return self.store.get_user(user_id) or self._new_user(user_id)

    @contextmanager
    def edit(self, user_id: str) -> Iterator[UserProfile]:
        """
        Locked read-modify-write of one user.

        Yields a working copy; it is committed when the block exits normally
        and discarded if the block raises.
        """
        with self.store.lock(f"user:{user_id}"):
            user = self.store.get_user(user_id)
            if user is None:
                logger.info("[Ledger] Creating user %s", user_id)
                user = self._new_user(user_id)
            yield user
            self.store.put_user(user)

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    def record_activity(
        self,
        user_id: str,
        base_points: float,
        now: Optional[datetime] = None,
    ) -> ActivityResult:
        base = _check_base_points(base_points)
        now = clock.as_utc(now) if now is not None else clock.utc_now()

        with self.edit(user_id) as user:
            user.streak = next_streak(user, now)
            user.last_activity_at = now

            multiplier = streak_multiplier(user.streak)
            award = int(base * multiplier)
            user.points += award
            user.xp += award

            new_badges: List[str] = []
            while user.xp >= xp_threshold(user.level):
                user.xp -= xp_threshold(user.level)
                user.level += 1
                user.points += LEVEL_UP_BONUS
                badge = level_badge(user.level)
                if self._grant(user, badge):
                    new_badges.append(badge)

            if self.memory.turn_count(user_id) >= MARATHON_TURNS:
                if self._grant(user, MARATHON_BADGE):
                    new_badges.append(MARATHON_BADGE)
            if self.memory.support_turn_count(user_id) >= EMPATHY_TURNS:
                if self._grant(user, EMPATHY_BADGE):
                    new_badges.append(EMPATHY_BADGE)

            result = ActivityResult(
                award=award,
                multiplier=multiplier,
                streak=user.streak,
                level=user.level,
                points=user.points,
                new_badges=new_badges,
            )

        logger.info(
            "[Ledger] %s +%d (x%d, streak=%d, level=%d, badges=%s)",
            user_id,
            result.award,
            result.multiplier,
            result.streak,
            result.level,
            result.new_badges,
        )
        return result

    def add_points(self, user_id: str, amount: int) -> UserProfile:
        """Admin grant: raises points only (no streak, xp or badges)."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError("amount must be a positive integer")
        with self.edit(user_id) as user:
            user.points += amount
            snapshot = user.model_copy(deep=True)
        logger.info("[Ledger] Admin grant %s +%d -> %d", user_id, amount, snapshot.points)
        return snapshot

    @staticmethod
    def _grant(user: UserProfile, badge: str) -> bool:
        if user.has_badge(badge):
            return False
        user.badges.append(badge)
        return True
