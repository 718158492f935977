from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings

from apps.orders.domain.errors import InvalidOrderTransitionError
from apps.orders.domain.pricing import to_minor_units
from apps.orders.models import Order
from apps.orders.services.order_service import OrderService
from apps.payments.application.facade import PaymentGatewayFacade
from apps.payments.domain.errors import PaymentBridgeError, PaymentIntentFailedError

logger = logging.getLogger("storefront.payments")


@dataclass(frozen=True)
class CreatePaymentIntentCommand:
    order: Order
    provider_code: str = ""


@dataclass(frozen=True)
class CreatePaymentIntentResult:
    order: Order
    handle_id: str
    client_secret: str | None
    amount_minor: int
    currency: str


class CreatePaymentIntentUseCase:
    """
    Ask the payment bridge for an authorization handle covering the order total.

    A bridge failure leaves the order pending; it is not rolled back.
    """

    @staticmethod
    def execute(cmd: CreatePaymentIntentCommand) -> CreatePaymentIntentResult:
        order = cmd.order
        if order.is_paid or order.status != Order.STATUS_PENDING:
            raise InvalidOrderTransitionError("Only pending, unpaid orders can be paid.")

        gateway = PaymentGatewayFacade.get(cmd.provider_code) if cmd.provider_code else PaymentGatewayFacade.default()
        amount_minor = to_minor_units(order.total_price)
        currency = getattr(settings, "STOREFRONT_CURRENCY", "usd")
        item_count = order.items.count()
        try:
            authorization = gateway.create_authorization(
                amount_minor=amount_minor,
                currency=currency,
                metadata={"order_id": str(order.id), "user_id": str(order.user_id)},
                description=f"Order {order.order_number} - {item_count} items",
            )
        except PaymentBridgeError as exc:
            logger.warning(
                "payment.intent_failed",
                extra={"order_id": order.id, "provider_code": gateway.code, "reason_code": exc.code},
            )
            if isinstance(exc, PaymentIntentFailedError):
                raise
            raise PaymentIntentFailedError(str(exc)) from exc

        OrderService.attach_payment_intent(order, authorization.handle_id, provider_code=gateway.code)
        logger.info(
            "payment.intent_created",
            extra={
                "order_id": order.id,
                "provider_code": gateway.code,
                "intent_reference": authorization.handle_id,
                "amount_minor": amount_minor,
            },
        )
        return CreatePaymentIntentResult(
            order=order,
            handle_id=authorization.handle_id,
            client_secret=authorization.client_secret,
            amount_minor=amount_minor,
            currency=currency,
        )
