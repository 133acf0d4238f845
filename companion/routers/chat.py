# companion/routers/chat.py
# -*- coding: utf-8 -*-
"""
Companion Server — chat & mood router
-------------------------------------
  POST /api/chat          -> one chat turn (always returns a reply)
  POST /api/mood          -> record a mood, get a heartbeat message
  GET  /api/mood/{user}   -> mood history, newest first

Flow for /api/chat:
  ChatRequest JSON
    -> submit_chat_turn(engine, ...)
       - decayed memory context
       - completion provider (fallback reply on upstream failure)
       - memory append, points, leaderboard
    -> ChatResponse JSON (reply, points_awarded, new_badges, streak, level)

Endpoints are plain `def` so FastAPI runs them in its thread pool; the
store's per-key locks keep concurrent requests consistent.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends

from companion.core.engine import Engine, get_engine
from companion.core.pipeline import submit_chat_turn
from companion.models.chat_request import ChatRequest, MoodRequest
from companion.models.chat_response import ChatResponse, MoodResponse
from companion.models.memory_model import MoodEntry

router = APIRouter(prefix="/api", tags=["chat"])
logger = logging.getLogger(__name__)


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
)
def chat_endpoint(
    request: ChatRequest,
    engine: Engine = Depends(get_engine),
) -> ChatResponse:
    logger.info("[/api/chat] user=%s locale=%s", request.user_id, request.locale)

    result = submit_chat_turn(engine, request.user_id, request.message, request.locale)

    if result.activity is None:
        return ChatResponse(reply=result.reply)
    return ChatResponse(
        reply=result.reply,
        points_awarded=result.activity.award,
        new_badges=result.activity.new_badges,
        streak=result.activity.streak,
        level=result.activity.level,
    )


@router.post("/mood", response_model=MoodResponse)
def record_mood(
    request: MoodRequest,
    engine: Engine = Depends(get_engine),
) -> MoodResponse:
    message = engine.moods.record_mood(request.user_id, request.mood, request.locale)
    return MoodResponse(heartbeat_message=message, mood=request.mood)


@router.get("/mood/{user_id}", response_model=List[MoodEntry])
def list_moods(user_id: str, engine: Engine = Depends(get_engine)) -> List[MoodEntry]:
    return engine.moods.list_moods(user_id)
