# companion/models/user_model.py
# -*- coding: utf-8 -*-
"""
Companion Server — User model
-----------------------------
Per-user gamified state owned by the ProgressionLedger.

Invariants kept by the ledger (not by this model):
- points >= 0, level >= 1, streak >= 0
- 0 <= xp < xp_threshold(level)
- inventory / badges hold no duplicates (lists keep acquisition order)
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    """
    Gamified state for one user.

    Attributes
    ----------
    user_id:
        Client-supplied identifier (trusted, no authentication).
    points:
        Spendable balance; raised by activity, lowered by purchases.
    level / xp:
        Level and progress towards the next level.
    streak:
        Consecutive UTC days with at least one activity.
    last_activity_at:
        Timestamp of the last recorded activity, None before the first one.
    inventory:
        Owned shop item ids.
    badges:
        Earned badge names.
    memory_window:
        How many recent turns the MemoryStore may put into context.
    """

    user_id: str
    points: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    last_activity_at: Optional[datetime] = None
    inventory: List[str] = Field(default_factory=list)
    badges: List[str] = Field(default_factory=list)
    memory_window: int = Field(default=30, ge=1)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def owns(self, item_id: str) -> bool:
        return item_id in self.inventory

    def has_badge(self, badge: str) -> bool:
        return badge in self.badges
