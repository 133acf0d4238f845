# companion/routers/daily.py
# -*- coding: utf-8 -*-
"""
Companion Server — daily gate router
------------------------------------
  GET  /api/daily/oracle               -> today's oracle (placeholder after first read)
  GET  /api/daily/question/{user_id}   -> the user's current question (no answer)
  POST /api/daily/question/answer      -> grade an answer, award once
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from companion.core import clock
from companion.core.daily import oracle_placeholder
from companion.core.engine import Engine, get_engine
from companion.models.chat_request import AnswerRequest
from companion.models.chat_response import AnswerResponse, OracleResponse
from companion.models.daily_model import QuestionView

router = APIRouter(prefix="/api/daily", tags=["daily"])


@router.get("/oracle", response_model=OracleResponse)
def get_daily_oracle(engine: Engine = Depends(get_engine)) -> OracleResponse:
    now = clock.utc_now()
    result = engine.daily.get_or_create_oracle(now)
    payload = result.resource.payload
    return OracleResponse(
        message=oracle_placeholder(now) if result.already_consumed else payload,
        date=result.resource.date,
        already_consumed=result.already_consumed,
        oracle=payload,
    )


@router.get("/question/{user_id}", response_model=QuestionView)
def get_daily_question(user_id: str, engine: Engine = Depends(get_engine)) -> QuestionView:
    return engine.daily.get_or_create_question(user_id).to_view()


@router.post(
    "/question/answer",
    response_model=AnswerResponse,
    response_model_exclude_none=True,
)
def answer_daily_question(
    request: AnswerRequest,
    engine: Engine = Depends(get_engine),
) -> AnswerResponse:
    result = engine.daily.answer_question(request.user_id, request.choice_index)
    return AnswerResponse(
        correct=result.correct,
        reward=result.reward,
        already_answered=result.already_answered,
        points=result.activity.points if result.activity is not None else None,
    )
