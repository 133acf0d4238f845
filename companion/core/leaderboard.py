# companion/core/leaderboard.py
# -*- coding: utf-8 -*-
"""
Companion Server — Leaderboard
------------------------------
Top-N ranking derived from ProgressionLedger snapshots.

Ordering: points descending, then user_id ascending. At most TOP_N rows,
one per user. Writes go through the single "leaderboard" lock so two
simultaneous chat turns cannot drop each other's update.
"""

from __future__ import annotations

import logging
from typing import List

from companion.models.leaderboard_model import LeaderboardEntry
from companion.runtime_state import StateStore

logger = logging.getLogger(__name__)

TOP_N: int = 10


def rank(entries: List[LeaderboardEntry]) -> List[LeaderboardEntry]:
    return sorted(entries, key=lambda e: (-e.points, e.user_id))[:TOP_N]


class Leaderboard:
    def __init__(self, store: StateStore) -> None:
        self.store = store

    def update(self, user_id: str) -> List[LeaderboardEntry]:
        """
        Replace the user's row with their current profile and re-rank.

        The profile is read inside the leaderboard lock, so a late caller
        can never put an older snapshot over a newer one.
        """
        with self.store.lock("leaderboard"):
            user = self.store.get_user(user_id)
            entries = [e for e in self.store.leaderboard() if e.user_id != user_id]
            if user is not None:
                entries.append(
                    LeaderboardEntry(user_id=user_id, points=user.points, level=user.level)
                )
            ranked = rank(entries)
            self.store.put_leaderboard(ranked)

        logger.debug("[Leaderboard] Updated for %s (%d rows)", user_id, len(ranked))
        return ranked

    def read(self) -> List[LeaderboardEntry]:
        return self.store.leaderboard()
