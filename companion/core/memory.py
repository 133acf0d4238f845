# companion/core/memory.py
# -*- coding: utf-8 -*-
"""
Companion Server — MemoryStore
------------------------------
Append-only conversation log per user, plus the age-decayed context window
that is sent to the completion provider.

Decay (age = whole days since the turn, see clock.age_in_days):

    age < 3        -> FRESH      verbatim
    3 <= age < 7   -> FADED      user text prefixed with "[from N days ago] "
    age >= 7       -> FORGOTTEN  left out of the context, kept in storage

The window is the `memory_window` most recent entries; decay is applied to
that window, so forgotten turns are not replaced by older ones.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional

from companion.core import clock
from companion.models.memory_model import ContextTurn, MemoryEntry, Salience
from companion.runtime_state import StateStore

logger = logging.getLogger(__name__)

FADE_AFTER_DAYS: int = 3
FORGET_AFTER_DAYS: int = 7

# Turns mentioning any of these count towards the "Empathy Expert" badge.
SUPPORT_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "sad",
        "lonely",
        "anxious",
        "anxiety",
        "stressed",
        "stress",
        "depressed",
        "worried",
        "scared",
        "afraid",
        "upset",
        "overwhelmed",
        "hurt",
        "cry",
        "crying",
        "tired",
    }
)

_WORD_RE = re.compile(r"[a-z']+")


def classify_age(age_days: int) -> Salience:
    if age_days < FADE_AFTER_DAYS:
        return Salience.FRESH
    if age_days < FORGET_AFTER_DAYS:
        return Salience.FADED
    return Salience.FORGOTTEN


def faded_marker(age_days: int) -> str:
    unit = "day" if age_days == 1 else "days"
    return f"[from {age_days} {unit} ago] "


def is_support_turn(text: str) -> bool:
    words = _WORD_RE.findall(text.lower())
    return any(w in SUPPORT_KEYWORDS for w in words)


class MemoryStore:
    """Owns the "memory:<user_id>" slice of the datastore."""

    def __init__(self, store: StateStore, default_window: int = 30) -> None:
        self.store = store
        self.default_window = default_window

    def append(
        self,
        user_id: str,
        user_text: str,
        bot_text: str,
        now: Optional[datetime] = None,
    ) -> MemoryEntry:
        """Record one completed turn. Call only after the completion succeeded."""
        entry = MemoryEntry(
            user_id=user_id,
            user_text=user_text,
            bot_text=bot_text,
            timestamp=clock.as_utc(now) if now is not None else clock.utc_now(),
        )
        with self.store.lock(f"memory:{user_id}"):
            self.store.append_memory(entry)
        logger.debug("[MemoryStore] Appended turn for %s", user_id)
        return entry

    def build_context(
        self,
        user_id: str,
        now: Optional[datetime] = None,
        window: Optional[int] = None,
    ) -> List[ContextTurn]:
        """
        Return the decayed context window, oldest first.

        `window` defaults to the user's memory_window (default_window for
        users that have no profile yet).
        """
        now = now or clock.utc_now()
        if window is None:
            user = self.store.get_user(user_id)
            window = user.memory_window if user is not None else self.default_window
        if window <= 0:
            return []

        recent = self.store.memory_entries(user_id)[-window:]

        context: List[ContextTurn] = []
        for entry in recent:
            age = max(clock.age_in_days(entry.timestamp, now), 0)
            salience = classify_age(age)
            if salience is Salience.FORGOTTEN:
                continue
            user_text = entry.user_text
            if salience is Salience.FADED:
                user_text = faded_marker(age) + user_text
            context.append(
                ContextTurn(
                    user_text=user_text,
                    bot_text=entry.bot_text,
                    age_days=age,
                    salience=salience,
                    timestamp=entry.timestamp,
                )
            )
        return context

    def turn_count(self, user_id: str) -> int:
        return len(self.store.memory_entries(user_id))

    def support_turn_count(self, user_id: str) -> int:
        return sum(
            1 for e in self.store.memory_entries(user_id) if is_support_turn(e.user_text)
        )

    @staticmethod
    def as_messages(context: List[ContextTurn]) -> List[Dict[str, str]]:
        """
        Render a context window in OpenAI-style message format:

            [{"role": "user", "content": "..."},
             {"role": "assistant", "content": "..."}, ...]
        """
        messages: List[Dict[str, str]] = []
        for turn in context:
            messages.append({"role": "user", "content": turn.user_text})
            messages.append({"role": "assistant", "content": turn.bot_text})
        return messages
