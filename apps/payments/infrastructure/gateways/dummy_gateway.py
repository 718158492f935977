from __future__ import annotations

import hashlib
import hmac
import json
import threading
from collections import OrderedDict
from uuid import uuid4

from django.conf import settings

from apps.payments.domain.errors import PaymentBridgeError, SignatureInvalidError
from apps.payments.domain.ports import PaymentAuthorization, VerifiedEvent


class DummyGateway:
    """
    In-process payment bridge for development and tests.

    Intents live in memory and the oldest are dropped past `max_tracked`;
    `complete_payment` stands in for the customer finishing payment in the
    browser. Webhook payloads are signed with HMAC-SHA256 over the raw body.
    """

    code = "dummy"
    name = "Dummy Gateway"

    def __init__(self, *, max_tracked: int = 10_000) -> None:
        self.max_tracked = max_tracked
        self._statuses: OrderedDict[str, str] = OrderedDict()
        self._lock = threading.Lock()

    def _secret(self) -> bytes:
        return (getattr(settings, "DUMMY_PAYMENTS_WEBHOOK_SECRET", "") or "").encode("utf-8")

    def create_authorization(
        self,
        *,
        amount_minor: int,
        currency: str,
        metadata: dict,
        description: str = "",
    ) -> PaymentAuthorization:
        if amount_minor < 0:
            raise PaymentBridgeError("Amount must be non-negative.")
        reference = f"DUMMY-{uuid4().hex[:12]}"
        with self._lock:
            self._statuses[reference] = "requires_payment_method"
            while len(self._statuses) > self.max_tracked:
                self._statuses.popitem(last=False)
        return PaymentAuthorization(
            handle_id=reference,
            client_secret=f"{reference}_secret_{uuid4().hex[:8]}",
            status="requires_payment_method",
        )

    def retrieve_status(self, *, handle_id: str) -> str:
        with self._lock:
            status = self._statuses.get(handle_id)
        if status is None:
            raise PaymentBridgeError(f"No such payment intent: {handle_id}")
        return status

    def complete_payment(self, handle_id: str, *, status: str = "succeeded") -> None:
        with self._lock:
            if handle_id not in self._statuses:
                raise PaymentBridgeError(f"No such payment intent: {handle_id}")
            self._statuses[handle_id] = status

    def sign(self, payload: bytes) -> str:
        return hmac.new(self._secret(), payload, hashlib.sha256).hexdigest()

    def verify_event(self, *, payload: bytes, signature: str) -> VerifiedEvent:
        if not self._secret():
            raise SignatureInvalidError("Webhook secret is not configured.")
        if not signature or not hmac.compare_digest(self.sign(payload), signature):
            raise SignatureInvalidError("Invalid signature.")
        try:
            data = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise PaymentBridgeError("Invalid payload.") from exc
        if not isinstance(data, dict):
            raise PaymentBridgeError("Invalid payload.")

        event_id = data.get("event_id") or ""
        event_type = data.get("type") or ""
        intent_reference = data.get("intent_reference") or ""
        metadata = data.get("metadata") or {}
        if not isinstance(event_id, str) or not isinstance(intent_reference, str) or not isinstance(metadata, dict):
            raise PaymentBridgeError("Invalid payload.")
        if not event_id or not intent_reference:
            raise PaymentBridgeError("Invalid payload.")
        return VerifiedEvent(
            event_id=event_id,
            event_type=event_type,
            intent_reference=intent_reference,
            status=data.get("status") or event_type,
            metadata=dict(metadata),
        )

    def public_config(self) -> dict:
        return {"provider": self.code, "publishable_key": ""}
