# companion/models/chat_response.py
# -*- coding: utf-8 -*-
"""
Companion Server — Response models
----------------------------------
Shapes returned by the HTTP layer. Optional fields are dropped from the
JSON (routers use response_model_exclude_none=True).
"""

from __future__ import annotations

import datetime as _dt
from typing import List, Optional

from pydantic import BaseModel, Field


class ChatResponse(BaseModel):
    """
    reply:
        Text to show the user. Always present, even when the provider failed.
    points_awarded:
        Points earned by this turn, absent when nothing was recorded
        (mock mode or upstream failure).
    """

    reply: str
    points_awarded: Optional[int] = None
    new_badges: List[str] = Field(default_factory=list)
    streak: Optional[int] = None
    level: Optional[int] = None


class MoodResponse(BaseModel):
    heartbeat_message: str
    mood: str


class PurchaseResponse(BaseModel):
    ok: bool = True
    item_id: str
    charged: bool
    points: int
    inventory: List[str]


class AnswerResponse(BaseModel):
    correct: bool
    reward: int
    already_answered: bool = False
    points: Optional[int] = None


class OracleResponse(BaseModel):
    message: str
    date: _dt.date
    already_consumed: bool
    oracle: str


class AdminPointsResponse(BaseModel):
    ok: bool = True
    user_id: str
    points: int
