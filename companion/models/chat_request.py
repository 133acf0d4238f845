# companion/models/chat_request.py
# -*- coding: utf-8 -*-
"""
Companion Server — Request models
---------------------------------
Validated request bodies, one per mutating operation:

- ChatRequest        : POST /api/chat
- MoodRequest        : POST /api/mood
- PurchaseRequest    : POST /api/shop/purchase
- AnswerRequest      : POST /api/daily/question/answer
- AdminPointsRequest : POST /api/admin/points

User ids are trusted as sent by the client (no authentication), but they
must be non-empty and reasonably short.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StringConstraints

UserId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
Locale = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=16)]


class ChatRequest(BaseModel):
    """
    Canonical request body for /api/chat.

    Fields
    ------
    user_id:
        Stable identifier of the person chatting.
    message:
        User utterance in plain text.
    locale:
        Language hint for the reply, e.g. "en", "es". The legacy field
        name `language` is accepted too.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"user_id": "alice", "message": "I had a rough day.", "locale": "en"},
            ]
        },
    )

    user_id: UserId
    message: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=4000)]
    locale: Locale = Field(
        default="en",
        validation_alias=AliasChoices("locale", "language"),
    )


class MoodRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: UserId
    mood: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=1, max_length=32)]
    locale: Locale = Field(
        default="en",
        validation_alias=AliasChoices("locale", "language"),
    )


class PurchaseRequest(BaseModel):
    user_id: UserId
    item_id: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


class AnswerRequest(BaseModel):
    user_id: UserId
    choice_index: int = Field(..., ge=0)


class AdminPointsRequest(BaseModel):
    user_id: UserId
    amount: int = Field(..., gt=0, le=1_000_000)
    secret: str
