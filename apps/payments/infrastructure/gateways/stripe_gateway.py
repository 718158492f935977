from __future__ import annotations

import stripe
from django.conf import settings

from apps.payments.domain.errors import PaymentBridgeError, PaymentIntentFailedError, SignatureInvalidError
from apps.payments.domain.ports import PaymentAuthorization, VerifiedEvent


def _field(obj, key: str, default=None):
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


class StripeGateway:
    code = "stripe"
    name = "Stripe"

    def _api_key(self) -> str:
        key = (getattr(settings, "STRIPE_SECRET_KEY", "") or "").strip()
        if not key:
            raise PaymentBridgeError("Stripe is not configured.")
        return key

    def create_authorization(
        self,
        *,
        amount_minor: int,
        currency: str,
        metadata: dict,
        description: str = "",
    ) -> PaymentAuthorization:
        api_key = self._api_key()
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor,
                currency=currency,
                automatic_payment_methods={"enabled": True},
                metadata={key: str(value) for key, value in metadata.items()},
                description=description or None,
                api_key=api_key,
            )
        except stripe.StripeError as exc:
            raise PaymentIntentFailedError(f"Failed to create payment intent: {exc.user_message or exc}") from exc
        return PaymentAuthorization(
            handle_id=intent["id"],
            client_secret=_field(intent, "client_secret"),
            status=_field(intent, "status", ""),
        )

    def retrieve_status(self, *, handle_id: str) -> str:
        api_key = self._api_key()
        try:
            intent = stripe.PaymentIntent.retrieve(handle_id, api_key=api_key)
        except stripe.StripeError as exc:
            raise PaymentBridgeError(f"Payment processing error: {exc.user_message or exc}") from exc
        return _field(intent, "status", "")

    def verify_event(self, *, payload: bytes, signature: str) -> VerifiedEvent:
        secret = (getattr(settings, "STRIPE_WEBHOOK_SECRET", "") or "").strip()
        if not secret:
            raise SignatureInvalidError("Webhook secret is not configured.")
        if not signature:
            raise SignatureInvalidError("Missing signature header.")
        try:
            event = stripe.Webhook.construct_event(payload, signature, secret)
        except stripe.SignatureVerificationError as exc:
            raise SignatureInvalidError(str(exc)) from exc
        except ValueError as exc:
            raise SignatureInvalidError("Invalid payload.") from exc

        intent = _field(_field(event, "data", {}), "object", {})
        event_type = _field(event, "type", "")
        metadata = _field(intent, "metadata", {})
        try:
            metadata = dict(metadata)
        except (TypeError, ValueError):
            metadata = {}
        return VerifiedEvent(
            event_id=_field(event, "id", ""),
            event_type=event_type,
            intent_reference=_field(intent, "id", ""),
            # The event type is authoritative: a failed attempt leaves the
            # intent itself in requires_payment_method.
            status=event_type,
            metadata=metadata,
        )

    def public_config(self) -> dict:
        return {
            "provider": self.code,
            "publishable_key": getattr(settings, "STRIPE_PUBLISHABLE_KEY", "") or "",
        }
