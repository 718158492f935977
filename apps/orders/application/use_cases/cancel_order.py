from __future__ import annotations

import logging
from dataclasses import dataclass

from apps.orders.domain.errors import OrderAccessDeniedError, OrderNotFoundError
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService

logger = logging.getLogger("storefront.orders")


@dataclass(frozen=True)
class CancelOrderCommand:
    order_id: int
    actor: object


class CancelOrderUseCase:
    """Owner-only cancellation from pending or processing. Stock is not restored."""

    @staticmethod
    def execute(cmd: CancelOrderCommand) -> Order:
        order = OrderService.find(cmd.order_id)
        if order is None:
            raise OrderNotFoundError("Order not found.")
        if not order.is_owned_by(cmd.actor):
            raise OrderAccessDeniedError("Unauthorized to cancel this order.")

        previous_status = order.status
        order = OrderService.cancel(order)
        logger.info(
            "order.cancelled",
            extra={"order_id": order.id, "previous_status": previous_status, "was_paid": order.is_paid},
        )
        return order
