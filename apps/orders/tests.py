from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from apps.catalog.models import Product
from apps.orders.application.use_cases.cancel_order import CancelOrderCommand, CancelOrderUseCase
from apps.orders.application.use_cases.create_order import CreateOrderCommand, CreateOrderUseCase
from apps.orders.application.use_cases.get_order import GetOrderCommand, GetOrderUseCase
from apps.orders.application.use_cases.update_order_status import (
    UpdateOrderStatusCommand,
    UpdateOrderStatusUseCase,
)
from apps.orders.domain.errors import (
    InsufficientStockError,
    InvalidOrderTransitionError,
    OrderAccessDeniedError,
    OrderAlreadyShippedError,
    OrderNotCancellableError,
    OrderValidationError,
    ProductNotFoundError,
)
from apps.orders.domain.pricing import PricingLine, PricingPolicy, calculate_order_pricing, to_minor_units
from apps.orders.domain.state_machine import OrderStateMachine
from apps.orders.domain.types import ShippingAddress
from apps.orders.models import Order

ADDRESS = {
    "name": "Ada Lovelace",
    "street": "12 Analytical Way",
    "city": "London",
    "state": "LDN",
    "zip_code": "N1 9GU",
    "country": "UK",
}


def make_product(**overrides) -> Product:
    values = {
        "name": "Notebook",
        "description": "Dotted A5 notebook",
        "price": Decimal("50.00"),
        "category": Product.CATEGORY_BOOKS,
        "images": [{"url": "https://cdn.example.com/notebook.jpg", "is_primary": True}],
        "stock": 10,
    }
    values.update(overrides)
    return Product.objects.create(**values)


class PricingTests(TestCase):
    def test_at_threshold_shipping_is_charged(self):
        pricing = calculate_order_pricing([(Decimal("50.00"), 2)])
        self.assertEqual(pricing.items_price, Decimal("100.00"))
        self.assertEqual(pricing.tax_price, Decimal("8.00"))
        self.assertEqual(pricing.shipping_price, Decimal("10.00"))
        self.assertEqual(pricing.total_price, Decimal("118.00"))

    def test_above_threshold_shipping_is_free(self):
        pricing = calculate_order_pricing([PricingLine(unit_price=Decimal("50.01"), quantity=2)])
        self.assertEqual(pricing.items_price, Decimal("100.02"))
        self.assertEqual(pricing.tax_price, Decimal("8.00"))
        self.assertEqual(pricing.shipping_price, Decimal("0.00"))
        self.assertEqual(pricing.total_price, Decimal("108.02"))

    def test_small_order(self):
        pricing = calculate_order_pricing([(Decimal("30.00"), 1)])
        self.assertEqual(pricing.tax_price, Decimal("2.40"))
        self.assertEqual(pricing.shipping_price, Decimal("10.00"))
        self.assertEqual(pricing.total_price, Decimal("42.40"))

    def test_tax_rounds_half_up(self):
        pricing = calculate_order_pricing([(Decimal("0.10"), 1)], PricingPolicy(tax_rate=Decimal("0.05")))
        self.assertEqual(pricing.tax_price, Decimal("0.01"))

    def test_rejects_bad_lines(self):
        with self.assertRaises(OrderValidationError):
            calculate_order_pricing([])
        with self.assertRaises(OrderValidationError) as ctx:
            calculate_order_pricing([(Decimal("5"), 1), (Decimal("5"), 0)])
        self.assertEqual(ctx.exception.field, "items[1].quantity")
        with self.assertRaises(OrderValidationError):
            calculate_order_pricing([(Decimal("-1"), 1)])

    def test_minor_units(self):
        self.assertEqual(to_minor_units(Decimal("42.40")), 4240)
        self.assertEqual(to_minor_units(Decimal("108.005")), 10801)


class OrderStateMachineTests(TestCase):
    def test_cancel_rules(self):
        self.assertTrue(OrderStateMachine.can_cancel("pending"))
        self.assertTrue(OrderStateMachine.can_cancel("processing"))
        with self.assertRaises(OrderAlreadyShippedError):
            OrderStateMachine.ensure_can_cancel("shipped")
        with self.assertRaises(OrderNotCancellableError):
            OrderStateMachine.ensure_can_cancel("delivered")
        with self.assertRaises(OrderNotCancellableError):
            OrderStateMachine.ensure_can_cancel("cancelled")

    def test_transitions_only_move_forward(self):
        OrderStateMachine.ensure_transition("pending", "processing")
        OrderStateMachine.ensure_transition("processing", "shipped")
        with self.assertRaises(InvalidOrderTransitionError):
            OrderStateMachine.ensure_transition("pending", "delivered")
        with self.assertRaises(InvalidOrderTransitionError):
            OrderStateMachine.ensure_transition("shipped", "processing")


class ShippingAddressTests(TestCase):
    def test_missing_field_is_reported(self):
        raw = dict(ADDRESS)
        raw.pop("city")
        with self.assertRaises(OrderValidationError) as ctx:
            ShippingAddress.build(raw)
        self.assertEqual(ctx.exception.field, "shipping_address.city")


class CreateOrderTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = get_user_model().objects.create_user(username="buyer", password="pass")
        self.product = make_product(stock=3)

    def _create(self, items):
        return CreateOrderUseCase.execute(
            CreateOrderCommand(user=self.user, items=items, shipping_address=ADDRESS)
        )

    def test_creates_pending_unpaid_order_without_touching_stock(self):
        order = self._create([{"product_id": self.product.id, "quantity": 2}])
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertFalse(order.is_paid)
        self.assertEqual(order.total_price, Decimal("118.00"))
        self.assertEqual(order.items.count(), 1)
        self.assertTrue(order.order_number.startswith("ORD-"))
        self.assertEqual(len(order.order_number), 12)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 3)

    def test_snapshot_is_frozen(self):
        order = self._create([{"product_id": self.product.id, "quantity": 1}])
        Product.objects.filter(pk=self.product.pk).update(price=Decimal("99.00"), name="Renamed")
        item = order.items.get()
        self.assertEqual(item.price, Decimal("50.00"))
        self.assertEqual(item.name, "Notebook")

    def test_insufficient_stock(self):
        with self.assertRaises(InsufficientStockError):
            self._create([{"product_id": self.product.id, "quantity": 4}])
        self.assertFalse(Order.objects.exists())

    def test_repeated_lines_are_checked_together(self):
        with self.assertRaises(InsufficientStockError):
            self._create(
                [
                    {"product_id": self.product.id, "quantity": 2},
                    {"product_id": self.product.id, "quantity": 2},
                ]
            )

    def test_inactive_product_is_unavailable(self):
        Product.objects.filter(pk=self.product.pk).update(is_active=False)
        with self.assertRaises(InsufficientStockError):
            self._create([{"product_id": self.product.id, "quantity": 1}])

    def test_unknown_product(self):
        with self.assertRaises(ProductNotFoundError):
            self._create([{"product_id": 424242, "quantity": 1}])


class OrderLifecycleTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        User = get_user_model()
        self.owner = User.objects.create_user(username="owner", password="pass")
        self.other = User.objects.create_user(username="other", password="pass")
        self.admin = User.objects.create_user(username="admin", password="pass", is_staff=True)
        product = make_product()
        self.order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=self.owner,
                items=[{"product_id": product.id, "quantity": 1}],
                shipping_address=ADDRESS,
            )
        )

    def _advance(self, status, tracking_number=""):
        return UpdateOrderStatusUseCase.execute(
            UpdateOrderStatusCommand(
                order_id=self.order.id, actor=self.admin, status=status, tracking_number=tracking_number
            )
        )

    def test_get_order_access(self):
        self.assertEqual(GetOrderUseCase.execute(GetOrderCommand(order_id=self.order.id, actor=self.owner)), self.order)
        self.assertEqual(GetOrderUseCase.execute(GetOrderCommand(order_id=self.order.id, actor=self.admin)), self.order)
        with self.assertRaises(OrderAccessDeniedError):
            GetOrderUseCase.execute(GetOrderCommand(order_id=self.order.id, actor=self.other))

    def test_only_owner_can_cancel(self):
        with self.assertRaises(OrderAccessDeniedError):
            CancelOrderUseCase.execute(CancelOrderCommand(order_id=self.order.id, actor=self.other))
        order = CancelOrderUseCase.execute(CancelOrderCommand(order_id=self.order.id, actor=self.owner))
        self.assertEqual(order.status, Order.STATUS_CANCELLED)

    def test_cancel_after_shipping_is_rejected_distinctly(self):
        self._advance("processing")
        order = self._advance("shipped", tracking_number="1Z999")
        self.assertEqual(order.tracking_number, "1Z999")
        with self.assertRaises(OrderAlreadyShippedError):
            CancelOrderUseCase.execute(CancelOrderCommand(order_id=self.order.id, actor=self.owner))

        order = self._advance("delivered")
        self.assertTrue(order.is_delivered)
        self.assertIsNotNone(order.delivered_at)
        with self.assertRaises(OrderNotCancellableError):
            CancelOrderUseCase.execute(CancelOrderCommand(order_id=self.order.id, actor=self.owner))

    def test_cancelling_twice_is_rejected(self):
        CancelOrderUseCase.execute(CancelOrderCommand(order_id=self.order.id, actor=self.owner))
        with self.assertRaises(OrderNotCancellableError):
            CancelOrderUseCase.execute(CancelOrderCommand(order_id=self.order.id, actor=self.owner))

    def test_status_update_requires_admin(self):
        with self.assertRaises(OrderAccessDeniedError):
            UpdateOrderStatusUseCase.execute(
                UpdateOrderStatusCommand(order_id=self.order.id, actor=self.owner, status="processing")
            )


class OrderApiTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        User = get_user_model()
        self.client = APIClient()
        self.owner = User.objects.create_user(username="owner", password="pass")
        self.other = User.objects.create_user(username="other", password="pass")
        self.admin = User.objects.create_user(username="admin", password="pass", is_staff=True)
        product = make_product(price=Decimal("30.00"))
        self.order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=self.owner,
                items=[{"product_id": product.id, "quantity": 1}],
                shipping_address=ADDRESS,
            )
        )

    def test_requires_authentication(self):
        res = self.client.get("/api/orders/")
        self.assertEqual(res.status_code, 401)

    def test_list_own_orders(self):
        self.client.force_authenticate(self.owner)
        res = self.client.get("/api/orders/")
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(len(body["data"]["orders"]), 1)
        self.assertEqual(body["data"]["pagination"]["total_orders"], 1)

        self.client.force_authenticate(self.other)
        res = self.client.get("/api/orders/")
        self.assertEqual(res.json()["data"]["orders"], [])

    def test_detail_forbidden_for_other_users(self):
        self.client.force_authenticate(self.other)
        res = self.client.get(f"/api/orders/{self.order.id}/")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json()["error"]["code"], "order_access_denied")

    def test_detail_not_found(self):
        self.client.force_authenticate(self.owner)
        res = self.client.get("/api/orders/999999/")
        self.assertEqual(res.status_code, 404)

    def test_cancel_via_post(self):
        self.client.force_authenticate(self.owner)
        res = self.client.post(f"/api/orders/{self.order.id}/cancel/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["order"]["status"], "cancelled")

    def test_admin_listing_and_stats(self):
        self.client.force_authenticate(self.owner)
        self.assertEqual(self.client.get("/api/orders/admin/all/").status_code, 403)

        self.client.force_authenticate(self.admin)
        res = self.client.get("/api/orders/admin/all/?sort_by=totalPrice&sort_order=asc")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(Decimal(res.json()["data"]["statistics"]["total_revenue"]), Decimal("42.40"))

        res = self.client.get("/api/orders/admin/stats/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["status_stats"][0]["status"], "pending")

    def test_invalid_status_update(self):
        self.client.force_authenticate(self.admin)
        res = self.client.put(f"/api/orders/{self.order.id}/status/", {"status": "teleported"}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["error"]["code"], "invalid_status")

        res = self.client.put(f"/api/orders/{self.order.id}/status/", {"status": "delivered"}, format="json")
        self.assertEqual(res.status_code, 400)
