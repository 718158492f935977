from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from apps.orders.domain.pricing import OrderPricing
from apps.orders.domain.state_machine import OrderStateMachine, OrderStatus
from apps.orders.domain.types import ShippingAddress
from apps.orders.models import Order, OrderItem


@dataclass(frozen=True)
class ItemSnapshot:
    product_id: int | None
    name: str
    price: Decimal
    quantity: int
    image: str = ""


class OrderService:
    @staticmethod
    def find(order_id) -> Order | None:
        try:
            return Order.objects.filter(pk=int(order_id)).first()
        except (TypeError, ValueError):
            return None

    @staticmethod
    def find_by_payment_intent(intent_id: str) -> Order | None:
        if not intent_id:
            return None
        return Order.objects.filter(payment_intent_id=intent_id).first()

    @staticmethod
    @transaction.atomic
    def create_order(
        *,
        user,
        items: list[ItemSnapshot],
        address: ShippingAddress,
        pricing: OrderPricing,
        payment_method: str = "card",
        notes: str = "",
    ) -> Order:
        order = Order.objects.create(
            user=user,
            shipping_name=address.name,
            shipping_street=address.street,
            shipping_city=address.city,
            shipping_state=address.state,
            shipping_zip_code=address.zip_code,
            shipping_country=address.country,
            shipping_phone=address.phone,
            payment_method=payment_method,
            items_price=pricing.items_price,
            tax_price=pricing.tax_price,
            shipping_price=pricing.shipping_price,
            total_price=pricing.total_price,
            status=Order.STATUS_PENDING,
            is_paid=False,
            notes=notes,
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=item.product_id,
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    image=item.image,
                )
                for item in items
            ]
        )
        return order

    @staticmethod
    def attach_payment_intent(order: Order, intent_id: str, *, provider_code: str = "") -> Order:
        order.payment_intent_id = intent_id
        update_fields = ["payment_intent_id", "updated_at"]
        if provider_code:
            order.payment_provider = provider_code
            update_fields.append("payment_provider")
        order.save(update_fields=update_fields)
        return order

    @staticmethod
    def mark_as_paid(order: Order, *, payment_result: dict) -> bool:
        """
        Flip `is_paid` exactly once.

        The conditional UPDATE is the check-and-set: of two concurrent callers
        only one sees a row count of 1. Orders still pending move to
        processing; a cancelled order keeps its status.
        """
        now = timezone.now()
        with transaction.atomic():
            won = Order.objects.filter(pk=order.pk, is_paid=False).update(
                is_paid=True,
                paid_at=now,
                payment_result=payment_result,
                updated_at=now,
            )
            if won:
                Order.objects.filter(pk=order.pk, status=Order.STATUS_PENDING).update(
                    status=Order.STATUS_PROCESSING,
                    updated_at=now,
                )
        order.refresh_from_db()
        return bool(won)

    @staticmethod
    def cancel_if_pending(order: Order) -> bool:
        updated = Order.objects.filter(pk=order.pk, status=Order.STATUS_PENDING, is_paid=False).update(
            status=Order.STATUS_CANCELLED,
            updated_at=timezone.now(),
        )
        order.refresh_from_db()
        return bool(updated)

    @staticmethod
    def cancel(order: Order) -> Order:
        OrderStateMachine.ensure_can_cancel(order.status)
        updated = Order.objects.filter(
            pk=order.pk,
            status__in=[status.value for status in OrderStateMachine.CANCELLABLE],
        ).update(status=Order.STATUS_CANCELLED, updated_at=timezone.now())
        order.refresh_from_db()
        if not updated:
            # Status moved underneath us; report against the fresh state.
            OrderStateMachine.ensure_can_cancel(order.status)
        return order

    @staticmethod
    def advance_status(order: Order, target: str, *, tracking_number: str = "") -> Order:
        destination = OrderStateMachine.ensure_transition(order.status, target)
        if destination == OrderStatus.CANCELLED:
            return OrderService.cancel(order)

        update_fields = ["status", "updated_at"]
        order.status = destination.value
        if destination == OrderStatus.SHIPPED and tracking_number:
            order.tracking_number = tracking_number
            update_fields.append("tracking_number")
        if destination == OrderStatus.DELIVERED and not order.is_delivered:
            order.is_delivered = True
            order.delivered_at = timezone.now()
            update_fields.extend(["is_delivered", "delivered_at"])
        order.save(update_fields=update_fields)
        return order
