from __future__ import annotations

from enum import StrEnum

from .errors import InvalidOrderTransitionError, OrderAlreadyShippedError, OrderNotCancellableError


class OrderStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderStateMachine:
    """
    Order lifecycle.

    pending -> processing -> shipped -> delivered, and cancelled from
    pending or processing only.
    """

    _FORWARD: dict[OrderStatus, OrderStatus] = {
        OrderStatus.PENDING: OrderStatus.PROCESSING,
        OrderStatus.PROCESSING: OrderStatus.SHIPPED,
        OrderStatus.SHIPPED: OrderStatus.DELIVERED,
    }
    CANCELLABLE: frozenset[OrderStatus] = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})

    @staticmethod
    def can_cancel(current: str) -> bool:
        return OrderStatus(current) in OrderStateMachine.CANCELLABLE

    @staticmethod
    def ensure_can_cancel(current: str) -> None:
        status = OrderStatus(current)
        if status == OrderStatus.SHIPPED:
            raise OrderAlreadyShippedError("Order has already shipped and cannot be cancelled.")
        if status not in OrderStateMachine.CANCELLABLE:
            raise OrderNotCancellableError("Order cannot be cancelled.")

    @staticmethod
    def ensure_transition(current: str, target: str) -> OrderStatus:
        source = OrderStatus(current)
        destination = OrderStatus(target)
        if destination == OrderStatus.CANCELLED:
            OrderStateMachine.ensure_can_cancel(source)
            return destination
        if OrderStateMachine._FORWARD.get(source) != destination:
            raise InvalidOrderTransitionError(f"Cannot move order from {source.value} to {destination.value}.")
        return destination
