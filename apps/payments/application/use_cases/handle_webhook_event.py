from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from apps.orders.models import Order
from apps.orders.services.order_service import OrderService
from apps.payments.application.facade import PaymentGatewayFacade
from apps.payments.application.use_cases.apply_payment_result import (
    ApplyPaymentResultCommand,
    ApplyPaymentResultUseCase,
)
from apps.payments.domain.errors import PaymentDomainError
from apps.payments.domain.ports import VerifiedEvent
from apps.payments.domain.statuses import PaymentOutcome, normalize_payment_status
from apps.payments.models import PaymentEvent

logger = logging.getLogger("storefront.payments")


@dataclass(frozen=True)
class HandleWebhookEventCommand:
    payload: bytes
    signature: str


def _payload_json(payload: bytes) -> dict:
    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _resolve_order(verified: VerifiedEvent, provider_code: str) -> Order | None:
    order = OrderService.find_by_payment_intent(verified.intent_reference)
    if order is not None:
        return order
    order = OrderService.find(verified.metadata.get("order_id"))
    if order is None or order.payment_intent_id not in ("", verified.intent_reference):
        return None
    if not order.payment_intent_id:
        OrderService.attach_payment_intent(order, verified.intent_reference, provider_code=provider_code)
    return order


def _finish(event: PaymentEvent, *, processing_status: str, outcome: str = "", order: Order | None = None) -> PaymentEvent:
    event.processing_status = processing_status
    event.outcome = outcome
    event.order = order
    event.processed_at = timezone.now()
    event.save(update_fields=["processing_status", "outcome", "order", "processed_at"])
    return event


class HandleWebhookEventUseCase:
    """
    Apply a pushed payment notification.

    Only the configured provider is accepted, and its signature is checked
    before anything is written. Redelivered events are recognised by id and
    not applied twice.
    """

    @staticmethod
    @transaction.atomic
    def execute(cmd: HandleWebhookEventCommand) -> PaymentEvent:
        provider_code = PaymentGatewayFacade.default_code()
        gateway = PaymentGatewayFacade.get(provider_code)
        try:
            verified = gateway.verify_event(payload=cmd.payload, signature=cmd.signature)
        except PaymentDomainError as exc:
            logger.warning(
                "payment.webhook_rejected",
                extra={"provider_code": provider_code, "reason_code": exc.code},
            )
            raise

        event, _ = PaymentEvent.objects.get_or_create(
            provider_code=provider_code,
            event_id=verified.event_id,
            defaults={
                "event_type": verified.event_type,
                "intent_reference": verified.intent_reference,
                "payload_json": _payload_json(cmd.payload),
                "processing_status": PaymentEvent.STATUS_PENDING,
            },
        )
        event = PaymentEvent.objects.select_for_update().get(pk=event.pk)
        if event.processing_status != PaymentEvent.STATUS_PENDING:
            logger.info(
                "payment.webhook_duplicate",
                extra={"provider_code": provider_code, "event_id": verified.event_id},
            )
            return event

        log_extra = {
            "provider_code": provider_code,
            "event_id": verified.event_id,
            "event_type": verified.event_type,
            "intent_reference": verified.intent_reference,
        }
        if normalize_payment_status(verified.status) == PaymentOutcome.PENDING:
            logger.info("payment.webhook_ignored", extra=log_extra)
            return _finish(event, processing_status=PaymentEvent.STATUS_IGNORED)

        order = _resolve_order(verified, provider_code)
        if order is None:
            logger.warning("payment.webhook_order_not_found", extra=log_extra)
            return _finish(event, processing_status=PaymentEvent.STATUS_FAILED, outcome="order_not_found")
        if order.payment_provider and order.payment_provider != provider_code:
            logger.warning("payment.webhook_provider_mismatch", extra={**log_extra, "order_id": order.id})
            return _finish(event, processing_status=PaymentEvent.STATUS_FAILED, outcome="provider_mismatch")

        result = ApplyPaymentResultUseCase.execute(
            ApplyPaymentResultCommand(
                order=order,
                status=verified.status,
                intent_reference=verified.intent_reference,
                source="webhook",
            )
        )
        return _finish(
            event,
            processing_status=PaymentEvent.STATUS_PROCESSED,
            outcome=result.application.value,
            order=order,
        )
