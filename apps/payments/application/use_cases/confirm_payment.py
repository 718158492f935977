from __future__ import annotations

from dataclasses import dataclass

from apps.orders.domain.errors import OrderAccessDeniedError, OrderNotFoundError
from apps.orders.services.order_service import OrderService
from apps.payments.application.facade import PaymentGatewayFacade
from apps.payments.application.use_cases.apply_payment_result import (
    ApplyPaymentResultCommand,
    ApplyPaymentResultResult,
    ApplyPaymentResultUseCase,
)
from apps.payments.domain.errors import PaymentHandleMismatchError, PaymentNotSuccessfulError
from apps.payments.domain.statuses import PaymentOutcome


@dataclass(frozen=True)
class ConfirmPaymentCommand:
    order_id: int
    handle_id: str
    actor: object
    provider_code: str = ""


class ConfirmPaymentUseCase:
    @staticmethod
    def execute(cmd: ConfirmPaymentCommand) -> ApplyPaymentResultResult:
        order = OrderService.find(cmd.order_id)
        if order is None:
            raise OrderNotFoundError("Order not found.")
        if not order.is_owned_by(cmd.actor):
            raise OrderAccessDeniedError("Unauthorized to access this order.")
        handle_id = (cmd.handle_id or "").strip()
        if not handle_id or handle_id != order.payment_intent_id:
            raise PaymentHandleMismatchError("Payment intent does not belong to this order.")

        provider_code = order.payment_provider or cmd.provider_code
        gateway = PaymentGatewayFacade.get(provider_code) if provider_code else PaymentGatewayFacade.default()
        status = gateway.retrieve_status(handle_id=handle_id)
        result = ApplyPaymentResultUseCase.execute(
            ApplyPaymentResultCommand(order=order, status=status, intent_reference=handle_id, source="confirmation")
        )
        if result.outcome != PaymentOutcome.SUCCEEDED:
            raise PaymentNotSuccessfulError("Payment not successful.", status=status)
        return result
