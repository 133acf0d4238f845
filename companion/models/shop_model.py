# companion/models/shop_model.py
# -*- coding: utf-8 -*-
"""
Companion Server — Shop catalog
-------------------------------
The catalog is fixed and seeded once at import time. Economy owns all
purchase logic; this module only describes what can be bought.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemEffect(str, Enum):
    """Side effect applied to the buyer when an item is purchased."""

    NONE = "none"
    MEMORY_WINDOW = "memory_window"  # raise UserProfile.memory_window


class ShopItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    cost: int = Field(..., gt=0)
    description: str
    effect: ItemEffect = ItemEffect.NONE
    effect_value: Optional[int] = None


# Fixed catalog: id -> item
CATALOG: Dict[str, ShopItem] = {
    item.id: item
    for item in (
        ShopItem(
            id="avatar_fox",
            name="Fox Avatar",
            cost=50,
            description="A curious fox to represent you in chat.",
        ),
        ShopItem(
            id="theme_aurora",
            name="Aurora Theme",
            cost=120,
            description="Soft northern-lights colours for the chat window.",
        ),
        ShopItem(
            id="voice_calm",
            name="Calm Voice Pack",
            cost=200,
            description="A slower, warmer voice for spoken replies.",
        ),
        ShopItem(
            id="memory_boost",
            name="Memory Boost",
            cost=300,
            description="Your companion remembers up to 60 recent turns instead of 30.",
            effect=ItemEffect.MEMORY_WINDOW,
            effect_value=60,
        ),
        ShopItem(
            id="golden_frame",
            name="Golden Profile Frame",
            cost=500,
            description="Show off on the leaderboard.",
        ),
    )
}
