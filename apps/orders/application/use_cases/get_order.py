from __future__ import annotations

from dataclasses import dataclass

from apps.orders.domain.errors import OrderAccessDeniedError, OrderNotFoundError
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService


def is_admin(actor) -> bool:
    return bool(getattr(actor, "is_staff", False))


@dataclass(frozen=True)
class GetOrderCommand:
    order_id: int
    actor: object


class GetOrderUseCase:
    @staticmethod
    def execute(cmd: GetOrderCommand) -> Order:
        order = OrderService.find(cmd.order_id)
        if order is None:
            raise OrderNotFoundError("Order not found.")
        if not order.is_owned_by(cmd.actor) and not is_admin(cmd.actor):
            raise OrderAccessDeniedError("Unauthorized to access this order.")
        return order
