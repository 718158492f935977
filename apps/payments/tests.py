from __future__ import annotations

import hashlib
import hmac
import json
from decimal import Decimal
from unittest import mock

import stripe
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from apps.catalog.models import Product
from apps.catalog.services.inventory_service import SaleOutcome
from apps.orders.application.use_cases.create_order import CreateOrderCommand, CreateOrderUseCase
from apps.orders.domain.errors import OrderAccessDeniedError
from apps.orders.models import Order
from apps.payments.application.facade import PaymentGatewayFacade
from apps.payments.application.use_cases.apply_payment_result import PaymentApplication
from apps.payments.application.use_cases.confirm_payment import ConfirmPaymentCommand, ConfirmPaymentUseCase
from apps.payments.application.use_cases.create_payment_intent import (
    CreatePaymentIntentCommand,
    CreatePaymentIntentUseCase,
)
from apps.payments.application.use_cases.handle_webhook_event import (
    HandleWebhookEventCommand,
    HandleWebhookEventUseCase,
)
from apps.payments.domain.errors import (
    PaymentBridgeError,
    PaymentHandleMismatchError,
    PaymentIntentFailedError,
    PaymentNotSuccessfulError,
    SignatureInvalidError,
    UnknownPaymentProviderError,
)
from apps.payments.domain.statuses import PaymentOutcome, normalize_payment_status
from apps.payments.infrastructure.gateways.dummy_gateway import DummyGateway
from apps.payments.infrastructure.gateways.stripe_gateway import StripeGateway
from apps.payments.models import PaymentEvent

ADDRESS = {
    "name": "Grace Hopper",
    "street": "1 Harbor Rd",
    "city": "Arlington",
    "state": "VA",
    "zip_code": "22201",
    "country": "US",
}


def dummy():
    return PaymentGatewayFacade.get("dummy")


def webhook_body(*, event_id: str, event_type: str, intent_reference: str, metadata: dict | None = None) -> bytes:
    return json.dumps(
        {
            "event_id": event_id,
            "type": event_type,
            "intent_reference": intent_reference,
            "metadata": metadata or {},
        }
    ).encode("utf-8")


class PaymentStatusTests(TestCase):
    def test_normalization(self):
        self.assertEqual(normalize_payment_status("succeeded"), PaymentOutcome.SUCCEEDED)
        self.assertEqual(normalize_payment_status("payment_intent.succeeded"), PaymentOutcome.SUCCEEDED)
        for raw in ("canceled", "failed", "payment_intent.payment_failed", "payment_intent.canceled"):
            self.assertEqual(normalize_payment_status(raw), PaymentOutcome.FAILED)
        for raw in ("requires_payment_method", "processing", "requires_action", "", None):
            self.assertEqual(normalize_payment_status(raw), PaymentOutcome.PENDING)

    def test_unknown_provider(self):
        with self.assertRaises(UnknownPaymentProviderError):
            PaymentGatewayFacade.get("paypal")


@override_settings(PAYMENTS_PROVIDER="dummy", DUMMY_PAYMENTS_WEBHOOK_SECRET="test-secret")
class PaymentFlowTestBase(TestCase):
    def setUp(self) -> None:
        super().setUp()
        User = get_user_model()
        self.owner = User.objects.create_user(username="owner", password="pass")
        self.other = User.objects.create_user(username="other", password="pass")
        self.product = Product.objects.create(
            name="Kettle",
            description="Stovetop kettle",
            price=Decimal("30.00"),
            category=Product.CATEGORY_HOME_GARDEN,
            images=[{"url": "https://cdn.example.com/kettle.jpg", "is_primary": True}],
            stock=3,
        )

    def place_order(self, quantity: int = 2) -> Order:
        order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=self.owner,
                items=[{"product_id": self.product.id, "quantity": quantity}],
                shipping_address=ADDRESS,
            )
        )
        CreatePaymentIntentUseCase.execute(CreatePaymentIntentCommand(order=order))
        order.refresh_from_db()
        return order

    def confirm(self, order: Order, actor=None):
        return ConfirmPaymentUseCase.execute(
            ConfirmPaymentCommand(order_id=order.id, handle_id=order.payment_intent_id, actor=actor or self.owner)
        )

    def deliver_webhook(self, body: bytes, signature: str | None = None) -> PaymentEvent:
        return HandleWebhookEventUseCase.execute(
            HandleWebhookEventCommand(payload=body, signature=signature if signature is not None else dummy().sign(body))
        )


class CreatePaymentIntentTests(PaymentFlowTestBase):
    def test_handle_is_attached_to_order(self):
        order = self.place_order()
        self.assertTrue(order.payment_intent_id.startswith("DUMMY-"))
        self.assertEqual(order.payment_provider, "dummy")
        self.assertEqual(dummy().retrieve_status(handle_id=order.payment_intent_id), "requires_payment_method")

    def test_bridge_failure_leaves_order_pending(self):
        order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=self.owner,
                items=[{"product_id": self.product.id, "quantity": 1}],
                shipping_address=ADDRESS,
            )
        )
        with mock.patch.object(
            type(dummy()), "create_authorization", side_effect=PaymentBridgeError("bridge down")
        ):
            with self.assertRaises(PaymentIntentFailedError):
                CreatePaymentIntentUseCase.execute(CreatePaymentIntentCommand(order=order))
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.payment_intent_id, "")

    def test_amount_is_in_minor_units(self):
        order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=self.owner,
                items=[{"product_id": self.product.id, "quantity": 1}],
                shipping_address=ADDRESS,
            )
        )
        result = CreatePaymentIntentUseCase.execute(CreatePaymentIntentCommand(order=order))
        self.assertEqual(result.amount_minor, 4240)
        self.assertEqual(result.currency, "usd")


class ConfirmPaymentTests(PaymentFlowTestBase):
    def test_confirm_marks_paid_and_takes_stock(self):
        order = self.place_order(quantity=2)
        dummy().complete_payment(order.payment_intent_id)

        result = self.confirm(order)

        self.assertEqual(result.application, PaymentApplication.PAID)
        order.refresh_from_db()
        self.assertTrue(order.is_paid)
        self.assertIsNotNone(order.paid_at)
        self.assertEqual(order.status, Order.STATUS_PROCESSING)
        self.assertEqual(order.payment_result["id"], order.payment_intent_id)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 1)
        self.assertEqual(self.product.sold, 2)

    def test_double_confirm_does_not_double_decrement(self):
        order = self.place_order(quantity=2)
        dummy().complete_payment(order.payment_intent_id)

        self.confirm(order)
        second = self.confirm(order)

        self.assertEqual(second.application, PaymentApplication.ALREADY_PAID)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 1)
        self.assertEqual(self.product.sold, 2)

    def test_confirm_then_webhook_applies_once(self):
        order = self.place_order(quantity=2)
        dummy().complete_payment(order.payment_intent_id)
        self.confirm(order)

        event = self.deliver_webhook(
            webhook_body(event_id="evt_1", event_type="payment_intent.succeeded", intent_reference=order.payment_intent_id)
        )

        self.assertEqual(event.outcome, PaymentApplication.ALREADY_PAID.value)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 1)

    def test_not_succeeded_leaves_order_unpaid(self):
        order = self.place_order()
        with self.assertRaises(PaymentNotSuccessfulError) as ctx:
            self.confirm(order)
        self.assertEqual(ctx.exception.status, "requires_payment_method")
        order.refresh_from_db()
        self.assertFalse(order.is_paid)
        self.assertEqual(order.status, Order.STATUS_PENDING)

    def test_failed_payment_cancels_pending_order(self):
        order = self.place_order()
        dummy().complete_payment(order.payment_intent_id, status="canceled")
        with self.assertRaises(PaymentNotSuccessfulError):
            self.confirm(order)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_CANCELLED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 3)

    def test_handle_must_match_order(self):
        order = self.place_order()
        with self.assertRaises(PaymentHandleMismatchError):
            ConfirmPaymentUseCase.execute(
                ConfirmPaymentCommand(order_id=order.id, handle_id="DUMMY-someoneelse", actor=self.owner)
            )

    def test_only_owner_can_confirm(self):
        order = self.place_order()
        with self.assertRaises(OrderAccessDeniedError):
            self.confirm(order, actor=self.other)

    def test_oversell_is_clamped_and_flagged(self):
        first = self.place_order(quantity=2)
        second = self.place_order(quantity=2)
        dummy().complete_payment(first.payment_intent_id)
        dummy().complete_payment(second.payment_intent_id)

        self.confirm(first)
        result = self.confirm(second)

        self.assertEqual([sale.outcome for sale in result.sales], [SaleOutcome.OVERSOLD])
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 0)
        self.assertEqual(self.product.sold, 4)

    def test_missing_product_is_skipped_on_payment(self):
        order = self.place_order(quantity=1)
        self.product.delete()
        dummy().complete_payment(order.payment_intent_id)

        result = self.confirm(order)

        self.assertEqual(result.application, PaymentApplication.PAID)
        self.assertEqual([sale.outcome for sale in result.sales], [SaleOutcome.MISSING])
        order.refresh_from_db()
        self.assertTrue(order.is_paid)

    def test_payment_after_cancellation_is_recorded_without_reopening(self):
        order = self.place_order()
        Order.objects.filter(pk=order.pk).update(status=Order.STATUS_CANCELLED)
        dummy().complete_payment(order.payment_intent_id)

        self.confirm(order)

        order.refresh_from_db()
        self.assertTrue(order.is_paid)
        self.assertEqual(order.status, Order.STATUS_CANCELLED)


class WebhookTests(PaymentFlowTestBase):
    def test_succeeded_event_marks_order_paid(self):
        order = self.place_order(quantity=1)
        event = self.deliver_webhook(
            webhook_body(event_id="evt_ok", event_type="payment_intent.succeeded", intent_reference=order.payment_intent_id)
        )
        self.assertEqual(event.processing_status, PaymentEvent.STATUS_PROCESSED)
        self.assertEqual(event.order_id, order.id)
        order.refresh_from_db()
        self.assertTrue(order.is_paid)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 2)

    def test_redelivered_event_is_a_noop(self):
        order = self.place_order(quantity=1)
        body = webhook_body(event_id="evt_dup", event_type="payment_intent.succeeded", intent_reference=order.payment_intent_id)
        self.deliver_webhook(body)
        self.deliver_webhook(body)
        self.assertEqual(PaymentEvent.objects.filter(event_id="evt_dup").count(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 2)

    def test_invalid_signature_changes_nothing(self):
        order = self.place_order(quantity=1)
        body = webhook_body(event_id="evt_bad", event_type="payment_intent.succeeded", intent_reference=order.payment_intent_id)
        with self.assertRaises(SignatureInvalidError):
            self.deliver_webhook(body, signature="0" * 64)
        order.refresh_from_db()
        self.assertFalse(order.is_paid)
        self.assertFalse(PaymentEvent.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 3)

    def test_failed_event_cancels_pending_order(self):
        order = self.place_order(quantity=1)
        self.deliver_webhook(
            webhook_body(
                event_id="evt_fail", event_type="payment_intent.payment_failed", intent_reference=order.payment_intent_id
            )
        )
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_CANCELLED)
        self.assertFalse(order.is_paid)

    def test_pending_status_is_ignored(self):
        order = self.place_order(quantity=1)
        event = self.deliver_webhook(
            webhook_body(event_id="evt_proc", event_type="payment_intent.processing", intent_reference=order.payment_intent_id)
        )
        self.assertEqual(event.processing_status, PaymentEvent.STATUS_IGNORED)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)

    def test_unknown_order_is_recorded_as_failed(self):
        event = self.deliver_webhook(
            webhook_body(event_id="evt_orphan", event_type="payment_intent.succeeded", intent_reference="DUMMY-nobody")
        )
        self.assertEqual(event.processing_status, PaymentEvent.STATUS_FAILED)
        self.assertIsNone(event.order_id)

    def test_order_found_through_metadata(self):
        order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=self.owner,
                items=[{"product_id": self.product.id, "quantity": 1}],
                shipping_address=ADDRESS,
            )
        )
        event = self.deliver_webhook(
            webhook_body(
                event_id="evt_meta",
                event_type="payment_intent.succeeded",
                intent_reference="DUMMY-late",
                metadata={"order_id": str(order.id)},
            )
        )
        self.assertEqual(event.order_id, order.id)
        order.refresh_from_db()
        self.assertTrue(order.is_paid)
        self.assertEqual(order.payment_intent_id, "DUMMY-late")
        self.assertEqual(order.payment_provider, "dummy")

    def test_event_for_order_of_another_provider_is_not_applied(self):
        order = self.place_order(quantity=1)
        Order.objects.filter(pk=order.pk).update(payment_provider="stripe")
        event = self.deliver_webhook(
            webhook_body(event_id="evt_other", event_type="payment_intent.succeeded", intent_reference=order.payment_intent_id)
        )
        self.assertEqual(event.processing_status, PaymentEvent.STATUS_FAILED)
        self.assertEqual(event.outcome, "provider_mismatch")
        order.refresh_from_db()
        self.assertFalse(order.is_paid)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 3)


class PaymentApiTests(PaymentFlowTestBase):
    def setUp(self) -> None:
        super().setUp()
        self.client = APIClient()

    def test_webhook_endpoint_rejects_bad_signature(self):
        order = self.place_order(quantity=1)
        body = webhook_body(event_id="evt_api_bad", event_type="payment_intent.succeeded", intent_reference=order.payment_intent_id)
        res = self.client.post(
            "/api/payments/webhook/", data=body, content_type="application/json", HTTP_STRIPE_SIGNATURE="nope"
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "signature_invalid")
        order.refresh_from_db()
        self.assertFalse(order.is_paid)

    def test_webhook_endpoint_accepts_signed_event_without_auth(self):
        order = self.place_order(quantity=1)
        body = webhook_body(event_id="evt_api_ok", event_type="payment_intent.succeeded", intent_reference=order.payment_intent_id)
        res = self.client.post(
            "/api/payments/webhook/",
            data=body,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=dummy().sign(body),
        )
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()["data"]["received"])
        order.refresh_from_db()
        self.assertTrue(order.is_paid)

    def test_webhook_endpoint_rejects_non_object_payload(self):
        body = b"[]"
        res = self.client.post(
            "/api/payments/webhook/", data=body, content_type="application/json", HTTP_X_SIGNATURE=dummy().sign(body)
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "payment_bridge_error")
        self.assertFalse(PaymentEvent.objects.exists())

    def test_provider_cannot_be_chosen_in_the_url(self):
        body = webhook_body(event_id="evt_route", event_type="payment_intent.succeeded", intent_reference="DUMMY-x")
        res = self.client.post(
            "/api/payments/webhook/dummy/", data=body, content_type="application/json", HTTP_X_SIGNATURE=dummy().sign(body)
        )
        self.assertEqual(res.status_code, 404)

    def test_confirm_endpoint(self):
        order = self.place_order(quantity=1)
        dummy().complete_payment(order.payment_intent_id)
        self.client.force_authenticate(self.owner)
        res = self.client.post(
            "/api/payments/confirm-payment/",
            {"payment_intent_id": order.payment_intent_id, "order_id": order.id},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        body = res.json()["data"]
        self.assertTrue(body["order"]["is_paid"])
        self.assertEqual(body["order"]["status"], "processing")

    def test_confirm_endpoint_reports_unsuccessful_status(self):
        order = self.place_order(quantity=1)
        self.client.force_authenticate(self.owner)
        res = self.client.post(
            "/api/payments/confirm-payment/",
            {"payment_intent_id": order.payment_intent_id, "order_id": order.id},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["details"]["status"], "requires_payment_method")

    def test_config_endpoint(self):
        res = self.client.get("/api/payments/config/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["provider"], "dummy")
        self.assertEqual(res.json()["data"]["currency"], "usd")


@override_settings(
    STRIPE_SECRET_KEY="sk_test_123",
    STRIPE_PUBLISHABLE_KEY="pk_test_123",
    STRIPE_WEBHOOK_SECRET="whsec_123",
)
class StripeGatewayTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.gateway = StripeGateway()

    def test_create_authorization(self):
        with mock.patch.object(
            stripe.PaymentIntent,
            "create",
            return_value={"id": "pi_123", "client_secret": "pi_123_secret", "status": "requires_payment_method"},
        ) as create:
            auth = self.gateway.create_authorization(
                amount_minor=4240, currency="usd", metadata={"order_id": 7, "user_id": 3}, description="Order"
            )
        self.assertEqual(auth.handle_id, "pi_123")
        self.assertEqual(auth.client_secret, "pi_123_secret")
        kwargs = create.call_args.kwargs
        self.assertEqual(kwargs["amount"], 4240)
        self.assertEqual(kwargs["metadata"], {"order_id": "7", "user_id": "3"})
        self.assertEqual(kwargs["api_key"], "sk_test_123")

    def test_create_authorization_failure(self):
        with mock.patch.object(stripe.PaymentIntent, "create", side_effect=stripe.StripeError("card declined")):
            with self.assertRaises(PaymentIntentFailedError):
                self.gateway.create_authorization(amount_minor=100, currency="usd", metadata={})

    def test_retrieve_status(self):
        with mock.patch.object(stripe.PaymentIntent, "retrieve", return_value={"id": "pi_1", "status": "succeeded"}):
            self.assertEqual(self.gateway.retrieve_status(handle_id="pi_1"), "succeeded")

    def test_verify_event(self):
        event = {
            "id": "evt_1",
            "type": "payment_intent.succeeded",
            "data": {"object": {"id": "pi_1", "metadata": {"order_id": "7"}}},
        }
        with mock.patch.object(stripe.Webhook, "construct_event", return_value=event):
            verified = self.gateway.verify_event(payload=b"{}", signature="t=1,v1=abc")
        self.assertEqual(verified.event_id, "evt_1")
        self.assertEqual(verified.intent_reference, "pi_1")
        self.assertEqual(verified.status, "payment_intent.succeeded")
        self.assertEqual(verified.metadata, {"order_id": "7"})

    def test_verify_event_bad_signature(self):
        with mock.patch.object(
            stripe.Webhook,
            "construct_event",
            side_effect=stripe.SignatureVerificationError("bad", "t=1,v1=abc"),
        ):
            with self.assertRaises(SignatureInvalidError):
                self.gateway.verify_event(payload=b"{}", signature="t=1,v1=abc")

    def test_missing_secret_key(self):
        with override_settings(STRIPE_SECRET_KEY=""):
            with self.assertRaises(PaymentBridgeError):
                self.gateway.retrieve_status(handle_id="pi_1")


@override_settings(DUMMY_PAYMENTS_WEBHOOK_SECRET="test-secret")
class DummyGatewayTests(TestCase):
    def test_empty_secret_rejects_every_event(self):
        body = webhook_body(event_id="evt_nokey", event_type="payment_intent.succeeded", intent_reference="DUMMY-x")
        signature = hmac.new(b"", body, hashlib.sha256).hexdigest()
        with override_settings(DUMMY_PAYMENTS_WEBHOOK_SECRET=""):
            with self.assertRaises(SignatureInvalidError):
                DummyGateway().verify_event(payload=body, signature=signature)

    def test_non_object_payload_is_rejected(self):
        gateway = DummyGateway()
        for body in (b"[]", b'"evt"', b"42"):
            with self.assertRaises(PaymentBridgeError):
                gateway.verify_event(payload=body, signature=gateway.sign(body))

    def test_oldest_intents_are_dropped(self):
        gateway = DummyGateway(max_tracked=2)
        handles = [
            gateway.create_authorization(amount_minor=100, currency="usd", metadata={}).handle_id for _ in range(3)
        ]
        with self.assertRaises(PaymentBridgeError):
            gateway.retrieve_status(handle_id=handles[0])
        for handle in handles[1:]:
            self.assertEqual(gateway.retrieve_status(handle_id=handle), "requires_payment_method")


@override_settings(
    PAYMENTS_PROVIDER="stripe",
    STRIPE_SECRET_KEY="sk_test_123",
    STRIPE_WEBHOOK_SECRET="whsec_123",
    DUMMY_PAYMENTS_WEBHOOK_SECRET="test-secret",
)
class StripeConfiguredWebhookTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.owner = get_user_model().objects.create_user(username="owner", password="pass")
        self.product = Product.objects.create(
            name="Teapot",
            description="Cast iron teapot",
            price=Decimal("30.00"),
            category=Product.CATEGORY_HOME_GARDEN,
            stock=3,
        )
        order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=self.owner,
                items=[{"product_id": self.product.id, "quantity": 1}],
                shipping_address=ADDRESS,
            )
        )
        with mock.patch.object(
            stripe.PaymentIntent,
            "create",
            return_value={"id": "pi_victim", "client_secret": "pi_victim_secret_x", "status": "requires_payment_method"},
        ):
            CreatePaymentIntentUseCase.execute(CreatePaymentIntentCommand(order=order))
        order.refresh_from_db()
        self.order = order
        self.client = APIClient()

    def test_order_records_provider(self):
        self.assertEqual(self.order.payment_intent_id, "pi_victim")
        self.assertEqual(self.order.payment_provider, "stripe")

    def test_dummy_signed_event_is_rejected(self):
        body = webhook_body(event_id="evt_forged", event_type="payment_intent.succeeded", intent_reference="pi_victim")
        signature = dummy().sign(body)
        res = self.client.post(
            "/api/payments/webhook/",
            data=body,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=signature,
            HTTP_X_SIGNATURE=signature,
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "signature_invalid")
        res = self.client.post(
            "/api/payments/webhook/dummy/", data=body, content_type="application/json", HTTP_X_SIGNATURE=signature
        )
        self.assertEqual(res.status_code, 404)
        self.order.refresh_from_db()
        self.assertFalse(self.order.is_paid)
        self.assertEqual(self.order.status, Order.STATUS_PENDING)
        self.assertFalse(PaymentEvent.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 3)

    def test_webhook_use_case_verifies_with_configured_provider(self):
        body = webhook_body(event_id="evt_forged", event_type="payment_intent.succeeded", intent_reference="pi_victim")
        with self.assertRaises(SignatureInvalidError):
            HandleWebhookEventUseCase.execute(HandleWebhookEventCommand(payload=body, signature=dummy().sign(body)))
        self.order.refresh_from_db()
        self.assertFalse(self.order.is_paid)

    def test_confirm_queries_the_order_provider(self):
        with override_settings(PAYMENTS_PROVIDER="dummy"):
            with mock.patch.object(
                stripe.PaymentIntent, "retrieve", return_value={"id": "pi_victim", "status": "succeeded"}
            ) as retrieve:
                result = ConfirmPaymentUseCase.execute(
                    ConfirmPaymentCommand(order_id=self.order.id, handle_id="pi_victim", actor=self.owner)
                )
        retrieve.assert_called_once()
        self.assertEqual(result.application, PaymentApplication.PAID)
