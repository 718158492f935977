from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction

from apps.orders.domain.errors import OrderAccessDeniedError, OrderNotFoundError, OrderValidationError
from apps.orders.domain.state_machine import OrderStatus
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService

logger = logging.getLogger("storefront.orders")


@dataclass(frozen=True)
class UpdateOrderStatusCommand:
    order_id: int
    actor: object
    status: str
    tracking_number: str = ""


class UpdateOrderStatusUseCase:
    @staticmethod
    @transaction.atomic
    def execute(cmd: UpdateOrderStatusCommand) -> Order:
        if not getattr(cmd.actor, "is_staff", False):
            raise OrderAccessDeniedError("Admin access required.")
        try:
            target = OrderStatus(cmd.status)
        except ValueError as exc:
            raise OrderValidationError("Valid status is required.", field="status") from exc

        order = Order.objects.select_for_update().filter(pk=cmd.order_id).first()
        if order is None:
            raise OrderNotFoundError("Order not found.")

        previous_status = order.status
        order = OrderService.advance_status(order, target.value, tracking_number=(cmd.tracking_number or "").strip())
        logger.info(
            "order.status_changed",
            extra={"order_id": order.id, "previous_status": previous_status, "status": order.status},
        )
        return order
