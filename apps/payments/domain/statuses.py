from __future__ import annotations

from enum import StrEnum


class PaymentOutcome(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"


_SUCCEEDED = {"succeeded", "payment_intent.succeeded"}
_FAILED = {
    "failed",
    "canceled",
    "cancelled",
    "payment_intent.payment_failed",
    "payment_intent.canceled",
}


def normalize_payment_status(raw: str) -> PaymentOutcome:
    """Map a gateway status or event type onto the three outcomes the order workflow acts on."""
    value = (raw or "").strip().lower()
    if value in _SUCCEEDED:
        return PaymentOutcome.SUCCEEDED
    if value in _FAILED:
        return PaymentOutcome.FAILED
    return PaymentOutcome.PENDING
