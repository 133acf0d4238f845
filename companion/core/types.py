# companion/core/types.py
# -*- coding: utf-8 -*-
"""
Companion Server — Shared result types
--------------------------------------
Small result containers returned by the core components:

- ActivityResult : outcome of ProgressionLedger.record_activity
- PurchaseResult : outcome of Economy.purchase
- OracleResult   : today's oracle plus whether it was already handed out
- AnswerResult   : outcome of DailyGate.answer_question
- ChatTurnResult : outcome of one chat submission
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from companion.models.daily_model import DailyResource


@dataclass
class ActivityResult:
    """
    Attributes
    ----------
    award:
        Points (and xp) granted for this activity, after the streak multiplier.
        Level-up bonuses are not included.
    multiplier:
        Streak multiplier that was applied (1, 2 or 10).
    streak / level / points:
        User state after the activity.
    new_badges:
        Badges issued by this call, in issue order.
    """
    award: int
    multiplier: int
    streak: int
    level: int
    points: int
    new_badges: List[str] = field(default_factory=list)


@dataclass
class PurchaseResult:
    item_id: str
    charged: bool
    points: int
    inventory: List[str]


@dataclass
class OracleResult:
    resource: DailyResource
    already_consumed: bool


@dataclass
class AnswerResult:
    correct: bool
    reward: int
    already_answered: bool = False
    activity: Optional[ActivityResult] = None


@dataclass
class ChatTurnResult:
    reply: str
    activity: Optional[ActivityResult] = None
    upstream_failed: bool = False
