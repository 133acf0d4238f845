# companion/models/daily_model.py
# -*- coding: utf-8 -*-
"""
Companion Server — Daily gate models
------------------------------------
- DailyResource : one generated payload per kind per UTC day (oracle)
- DailyQuestion : a user's stored quiz question, including the answer
- QuestionView  : what clients are allowed to see of a DailyQuestion
"""

from __future__ import annotations

import datetime as _dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DailyResource(BaseModel):
    """Immutable once created for its date."""

    model_config = ConfigDict(frozen=True)

    date: _dt.date
    payload: str
    source: str = "provider"   # "provider" | "pool"


class DailyQuestion(BaseModel):
    user_id: str
    date: _dt.date
    question: str
    choices: List[str] = Field(..., min_length=2)
    answer_index: int = Field(..., ge=0)
    reward: int = Field(default=25, ge=0)
    answered: bool = False
    answered_at: Optional[_dt.datetime] = None

    def to_view(self) -> "QuestionView":
        return QuestionView(
            date=self.date,
            question=self.question,
            choices=list(self.choices),
            reward=self.reward,
            answered=self.answered,
        )


class QuestionView(BaseModel):
    date: _dt.date
    question: str
    choices: List[str]
    reward: int
    answered: bool
