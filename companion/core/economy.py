# companion/core/economy.py
# -*- coding: utf-8 -*-
"""
Companion Server — Economy
--------------------------
Shop catalog lookups and purchase transactions against the ledger.

purchase(user_id, item_id), checked in this order:

    unknown item        -> NotFound
    already owned       -> success, nothing charged
    points < cost       -> InsufficientFunds, nothing changed
    otherwise           -> deduct cost, add to inventory, apply item effect

The deduction, the inventory insert and the effect are made on one working
copy of the user and committed together (ProgressionLedger.edit).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from companion.core.errors import InsufficientFunds, NotFound
from companion.core.progression import ProgressionLedger
from companion.core.types import PurchaseResult
from companion.models.shop_model import CATALOG, ItemEffect, ShopItem
from companion.models.user_model import UserProfile

logger = logging.getLogger(__name__)


def apply_effect(user: UserProfile, item: ShopItem) -> None:
    if item.effect is ItemEffect.MEMORY_WINDOW and item.effect_value:
        user.memory_window = max(user.memory_window, item.effect_value)


class Economy:
    def __init__(
        self,
        ledger: ProgressionLedger,
        catalog: Optional[Dict[str, ShopItem]] = None,
    ) -> None:
        self.ledger = ledger
        self.catalog = catalog if catalog is not None else CATALOG

    def list_items(self) -> List[ShopItem]:
        """Catalog sorted by cost, then id."""
        return sorted(self.catalog.values(), key=lambda i: (i.cost, i.id))

    def preview(self, item_id: str) -> ShopItem:
        item = self.catalog.get(item_id)
        if item is None:
            raise NotFound(f"unknown item: {item_id}")
        return item

    def purchase(self, user_id: str, item_id: str) -> PurchaseResult:
        item = self.preview(item_id)

        with self.ledger.edit(user_id) as user:
            if user.owns(item.id):
                logger.info("[Economy] %s already owns %s; nothing charged", user_id, item.id)
                charged = False
            else:
                if user.points < item.cost:
                    raise InsufficientFunds(
                        f"{item.name} costs {item.cost} points, you have {user.points}"
                    )
                user.points -= item.cost
                user.inventory.append(item.id)
                apply_effect(user, item)
                charged = True

            result = PurchaseResult(
                item_id=item.id,
                charged=charged,
                points=user.points,
                inventory=list(user.inventory),
            )

        if charged:
            logger.info(
                "[Economy] %s bought %s for %d (balance %d)",
                user_id,
                item.id,
                item.cost,
                result.points,
            )
        return result
