from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from apps.orders.application.use_cases.create_order import CreateOrderCommand, CreateOrderUseCase
from apps.orders.models import Order
from apps.payments.application.use_cases.create_payment_intent import (
    CreatePaymentIntentCommand,
    CreatePaymentIntentUseCase,
)

logger = logging.getLogger("storefront.checkout")


@dataclass(frozen=True)
class StartCheckoutCommand:
    user: object
    items: list[dict]
    shipping_address: dict
    payment_method: str = "card"
    notes: str = ""
    provider_code: str = ""


@dataclass(frozen=True)
class StartCheckoutResult:
    order: Order
    client_secret: str | None
    payment_intent_id: str

    @property
    def total_amount(self) -> Decimal:
        return self.order.total_price

    def as_dict(self) -> dict:
        return {
            "order_id": self.order.id,
            "order_number": self.order.order_number,
            "client_secret": self.client_secret,
            "payment_intent_id": self.payment_intent_id,
            "total_amount": str(self.total_amount),
        }


class StartCheckoutUseCase:
    """
    Create the pending order, then ask the payment bridge for a handle.

    The two steps commit separately: if the bridge call fails the order
    stays behind as pending and unpaid.
    """

    @staticmethod
    def execute(cmd: StartCheckoutCommand) -> StartCheckoutResult:
        order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=cmd.user,
                items=cmd.items,
                shipping_address=cmd.shipping_address,
                payment_method=cmd.payment_method,
                notes=cmd.notes,
            )
        )
        intent = CreatePaymentIntentUseCase.execute(
            CreatePaymentIntentCommand(order=order, provider_code=cmd.provider_code)
        )
        logger.info(
            "checkout.started",
            extra={"order_id": order.id, "user_id": order.user_id, "intent_reference": intent.handle_id},
        )
        return StartCheckoutResult(order=order, client_secret=intent.client_secret, payment_intent_id=intent.handle_id)
