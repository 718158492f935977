from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..models import Product

logger = logging.getLogger("storefront.inventory")


class SaleOutcome(StrEnum):
    RECORDED = "recorded"
    OVERSOLD = "oversold"
    MISSING = "missing"


@dataclass(frozen=True)
class SaleResult:
    product_id: int | None
    quantity: int
    outcome: SaleOutcome


class InventoryService:
    @staticmethod
    def decrement_if_at_least(product_id: int, quantity: int) -> bool:
        """Atomically take `quantity` units and count them as sold; False when stock is short."""
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")
        updated = Product.objects.filter(pk=product_id, stock__gte=quantity).update(
            stock=F("stock") - quantity,
            sold=F("sold") + quantity,
            updated_at=timezone.now(),
        )
        return updated == 1

    @staticmethod
    @transaction.atomic
    def record_sale(product_id: int | None, quantity: int) -> SaleResult:
        """
        Record a paid sale against the catalog.

        A product that no longer exists is skipped. When stock was already
        consumed by a concurrent checkout the remaining units are taken and
        stock stops at zero.
        """
        if product_id is None:
            logger.warning("inventory.sale_skipped", extra={"reason_code": "product_missing", "quantity": quantity})
            return SaleResult(product_id=None, quantity=quantity, outcome=SaleOutcome.MISSING)

        if InventoryService.decrement_if_at_least(product_id, quantity):
            return SaleResult(product_id=product_id, quantity=quantity, outcome=SaleOutcome.RECORDED)

        product = Product.objects.select_for_update().filter(pk=product_id).first()
        if product is None:
            logger.warning(
                "inventory.sale_skipped",
                extra={"product_id": product_id, "reason_code": "product_missing", "quantity": quantity},
            )
            return SaleResult(product_id=product_id, quantity=quantity, outcome=SaleOutcome.MISSING)

        logger.warning(
            "inventory.oversold",
            extra={"product_id": product_id, "quantity": quantity, "stock": product.stock},
        )
        Product.objects.filter(pk=product_id).update(
            stock=0, sold=F("sold") + quantity, updated_at=timezone.now()
        )
        return SaleResult(product_id=product_id, quantity=quantity, outcome=SaleOutcome.OVERSOLD)
