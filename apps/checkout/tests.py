from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from apps.catalog.models import Product
from apps.checkout.application.use_cases.start_checkout import StartCheckoutCommand, StartCheckoutUseCase
from apps.orders.models import Order
from apps.payments.application.facade import PaymentGatewayFacade
from apps.payments.domain.errors import PaymentBridgeError

ADDRESS = {
    "name": "Alan Turing",
    "street": "3 Bletchley Park",
    "city": "Milton Keynes",
    "state": "BKM",
    "zip_code": "MK3 6EB",
    "country": "UK",
    "phone": "+44 1908 640404",
}


@override_settings(PAYMENTS_PROVIDER="dummy")
class StartCheckoutTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = get_user_model().objects.create_user(username="shopper", password="pass")
        self.product = Product.objects.create(
            name="Desk Lamp",
            description="Adjustable desk lamp",
            price=Decimal("30.00"),
            category=Product.CATEGORY_HOME_GARDEN,
            images=[{"url": "https://cdn.example.com/lamp.jpg", "is_primary": True}],
            stock=5,
        )

    def test_creates_order_and_authorization(self):
        result = StartCheckoutUseCase.execute(
            StartCheckoutCommand(
                user=self.user,
                items=[{"product_id": self.product.id, "quantity": 1}],
                shipping_address=ADDRESS,
            )
        )
        data = result.as_dict()
        self.assertEqual(data["total_amount"], "42.40")
        self.assertTrue(data["client_secret"])
        self.assertTrue(data["order_number"].startswith("ORD-"))
        order = Order.objects.get(pk=data["order_id"])
        self.assertEqual(order.payment_intent_id, result.payment_intent_id)
        self.assertEqual(order.shipping_phone, "+44 1908 640404")

    def test_api_requires_authentication(self):
        client = APIClient()
        res = client.post("/api/payments/create-payment-intent/", {}, format="json")
        self.assertEqual(res.status_code, 401)

    def test_api_creates_checkout(self):
        client = APIClient()
        client.force_authenticate(self.user)
        res = client.post(
            "/api/payments/create-payment-intent/",
            {"items": [{"product_id": self.product.id, "quantity": 2}], "shipping_address": ADDRESS},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["total_amount"], "74.80")

    def test_api_reports_insufficient_stock(self):
        client = APIClient()
        client.force_authenticate(self.user)
        res = client.post(
            "/api/payments/create-payment-intent/",
            {"items": [{"product_id": self.product.id, "quantity": 6}], "shipping_address": ADDRESS},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "insufficient_stock")
        self.assertFalse(Order.objects.exists())

    def test_api_validates_address(self):
        client = APIClient()
        client.force_authenticate(self.user)
        address = dict(ADDRESS)
        address.pop("zip_code")
        res = client.post(
            "/api/payments/create-payment-intent/",
            {"items": [{"product_id": self.product.id, "quantity": 1}], "shipping_address": address},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "validation_error")

    def test_bridge_failure_keeps_pending_order(self):
        client = APIClient()
        client.force_authenticate(self.user)
        gateway = PaymentGatewayFacade.get("dummy")
        with mock.patch.object(type(gateway), "create_authorization", side_effect=PaymentBridgeError("down")):
            res = client.post(
                "/api/payments/create-payment-intent/",
                {"items": [{"product_id": self.product.id, "quantity": 1}], "shipping_address": ADDRESS},
                format="json",
            )
        self.assertEqual(res.status_code, 502)
        self.assertEqual(res.json()["error"]["code"], "payment_intent_failed")
        order = Order.objects.get()
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertFalse(order.is_paid)
