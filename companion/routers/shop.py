# companion/routers/shop.py
# -*- coding: utf-8 -*-
"""
Companion Server — shop router
------------------------------
  GET  /api/shop             -> catalog
  GET  /api/shop/{item_id}   -> one item (404 if unknown)
  POST /api/shop/purchase    -> buy an item (404 / 409 on failure)
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from companion.core.engine import Engine, get_engine
from companion.models.chat_request import PurchaseRequest
from companion.models.chat_response import PurchaseResponse
from companion.models.shop_model import ShopItem

router = APIRouter(prefix="/api/shop", tags=["shop"])


@router.get("", response_model=List[ShopItem])
def list_shop(engine: Engine = Depends(get_engine)) -> List[ShopItem]:
    return engine.economy.list_items()


@router.post("/purchase", response_model=PurchaseResponse)
def purchase(
    request: PurchaseRequest,
    engine: Engine = Depends(get_engine),
) -> PurchaseResponse:
    result = engine.economy.purchase(request.user_id, request.item_id)
    if result.charged:
        engine.leaderboard.update(request.user_id)
    return PurchaseResponse(
        item_id=result.item_id,
        charged=result.charged,
        points=result.points,
        inventory=result.inventory,
    )


@router.get("/{item_id}", response_model=ShopItem)
def preview_item(item_id: str, engine: Engine = Depends(get_engine)) -> ShopItem:
    return engine.economy.preview(item_id)
