# companion/models/leaderboard_model.py
# -*- coding: utf-8 -*-
"""Derived leaderboard snapshot row."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LeaderboardEntry(BaseModel):
    user_id: str
    points: int = Field(..., ge=0)
    level: int = Field(..., ge=1)
