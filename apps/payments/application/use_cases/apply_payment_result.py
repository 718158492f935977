from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from django.db import transaction
from django.utils import timezone

from apps.catalog.services.inventory_service import InventoryService, SaleResult
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService
from apps.payments.domain.statuses import PaymentOutcome, normalize_payment_status

logger = logging.getLogger("storefront.payments")


class PaymentApplication(StrEnum):
    PAID = "paid"
    ALREADY_PAID = "already_paid"
    CANCELLED = "cancelled"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ApplyPaymentResultCommand:
    order: Order
    status: str
    intent_reference: str
    source: str


@dataclass(frozen=True)
class ApplyPaymentResultResult:
    order: Order
    outcome: PaymentOutcome
    application: PaymentApplication
    sales: tuple[SaleResult, ...] = ()


class ApplyPaymentResultUseCase:
    """
    The one payment transition shared by synchronous confirmation and webhooks.

    Success marks the order paid at most once and, for the caller that won
    that update, records the sale of every line item. A terminal failure
    cancels an order that is still pending. Anything else leaves the order
    untouched.
    """

    @staticmethod
    @transaction.atomic
    def execute(cmd: ApplyPaymentResultCommand) -> ApplyPaymentResultResult:
        order = cmd.order
        outcome = normalize_payment_status(cmd.status)
        log_extra = {"order_id": order.id, "intent_reference": cmd.intent_reference, "source": cmd.source}

        if outcome == PaymentOutcome.SUCCEEDED:
            payment_result = {
                "id": cmd.intent_reference,
                "status": PaymentOutcome.SUCCEEDED.value,
                "update_time": timezone.now().isoformat(),
                "source": cmd.source,
            }
            if not OrderService.mark_as_paid(order, payment_result=payment_result):
                logger.info("payment.already_applied", extra=log_extra)
                return ApplyPaymentResultResult(order=order, outcome=outcome, application=PaymentApplication.ALREADY_PAID)

            sales = tuple(
                InventoryService.record_sale(item.product_id, item.quantity) for item in order.items.all()
            )
            if order.status == Order.STATUS_CANCELLED:
                logger.warning("payment.succeeded_on_cancelled_order", extra=log_extra)
            logger.info("payment.succeeded", extra={**log_extra, "total_price": str(order.total_price)})
            return ApplyPaymentResultResult(
                order=order,
                outcome=outcome,
                application=PaymentApplication.PAID,
                sales=sales,
            )

        if outcome == PaymentOutcome.FAILED:
            if OrderService.cancel_if_pending(order):
                logger.info("payment.failed", extra={**log_extra, "reason_code": cmd.status})
                return ApplyPaymentResultResult(order=order, outcome=outcome, application=PaymentApplication.CANCELLED)
            return ApplyPaymentResultResult(order=order, outcome=outcome, application=PaymentApplication.UNCHANGED)

        return ApplyPaymentResultResult(order=order, outcome=outcome, application=PaymentApplication.UNCHANGED)
