# companion/routers/profile.py
# -*- coding: utf-8 -*-
"""
Companion Server — profile / leaderboard / admin router
-------------------------------------------------------
  GET  /api/profile/{user_id}  -> UserProfile (zero defaults for new users)
  GET  /api/leaderboard        -> top 10 {user_id, points, level}
  POST /api/admin/points       -> grant points (needs the admin secret)
"""

from __future__ import annotations

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends

from companion.core.engine import Engine, get_engine
from companion.models.chat_request import AdminPointsRequest
from companion.models.chat_response import AdminPointsResponse
from companion.models.leaderboard_model import LeaderboardEntry
from companion.models.user_model import UserProfile

router = APIRouter(prefix="/api", tags=["profile"])
logger = logging.getLogger(__name__)


@router.get("/profile/{user_id}", response_model=UserProfile)
def get_profile(user_id: str, engine: Engine = Depends(get_engine)) -> UserProfile:
    return engine.ledger.get_profile(user_id)


@router.get("/leaderboard")
def get_leaderboard(engine: Engine = Depends(get_engine)) -> Dict[str, List[LeaderboardEntry]]:
    return {"top": engine.leaderboard.read()}


@router.post("/admin/points", response_model=AdminPointsResponse)
def admin_add_points(
    request: AdminPointsRequest,
    engine: Engine = Depends(get_engine),
) -> AdminPointsResponse:
    user = engine.admin_add_points(request.user_id, request.amount, request.secret)
    logger.info("[/api/admin/points] granted %d to %s", request.amount, request.user_id)
    return AdminPointsResponse(user_id=user.user_id, points=user.points)
