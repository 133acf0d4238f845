# companion/models/memory_model.py
# -*- coding: utf-8 -*-
"""
Companion Server — Memory / mood models
---------------------------------------
- MemoryEntry : one stored conversation turn (never deleted)
- ContextTurn : a MemoryEntry as it appears in the decayed context window
- MoodEntry   : one self-reported mood
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class MemoryEntry(BaseModel):
    """One user/bot exchange as stored in the log."""

    user_id: str
    user_text: str
    bot_text: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Salience(str, Enum):
    """How a stored turn shows up in context, based on its age."""

    FRESH = "fresh"          # age < 3 days, verbatim
    FADED = "faded"          # 3 <= age < 7 days, marked with its age
    FORGOTTEN = "forgotten"  # age >= 7 days, left out of context


class ContextTurn(BaseModel):
    """A turn selected for the context window (never FORGOTTEN)."""

    user_text: str
    bot_text: str
    age_days: int
    salience: Salience
    timestamp: datetime


class MoodEntry(BaseModel):
    user_id: str
    mood: str
    locale: str = "en"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
