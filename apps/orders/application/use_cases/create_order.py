from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field

from django.db import transaction

from apps.catalog.models import Product
from apps.orders.domain.errors import InsufficientStockError, OrderValidationError, ProductNotFoundError
from apps.orders.domain.pricing import PricingLine, PricingPolicy, calculate_order_pricing
from apps.orders.domain.types import ShippingAddress, build_line_items
from apps.orders.models import Order
from apps.orders.services.order_service import ItemSnapshot, OrderService

logger = logging.getLogger("storefront.orders")

PAYMENT_METHODS = ("card", "paypal", "bank_transfer")


@dataclass(frozen=True)
class CreateOrderCommand:
    user: object
    items: list[dict]
    shipping_address: dict
    payment_method: str = "card"
    notes: str = ""
    pricing_policy: PricingPolicy | None = field(default=None, compare=False)


class CreateOrderUseCase:
    """
    Price the requested items against the live catalog and persist a pending order.

    Stock is only checked here; it is taken when the payment succeeds.
    """

    @staticmethod
    @transaction.atomic
    def execute(cmd: CreateOrderCommand) -> Order:
        if not getattr(cmd.user, "is_authenticated", False):
            raise OrderValidationError("Authentication required.")
        if cmd.payment_method not in PAYMENT_METHODS:
            raise OrderValidationError("Invalid payment method.", field="payment_method")
        if len(cmd.notes or "") > 500:
            raise OrderValidationError("Notes must be 500 characters or fewer.", field="notes")

        requests = build_line_items(cmd.items)
        address = ShippingAddress.build(cmd.shipping_address)

        requested: OrderedDict[int, int] = OrderedDict()
        for line in requests:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        products = Product.objects.in_bulk(list(requested.keys()))
        for product_id, quantity in requested.items():
            product = products.get(product_id)
            if product is None:
                raise ProductNotFoundError(f"Product with ID {product_id} not found.", product_id=product_id)
            if not product.is_active or product.stock < quantity:
                raise InsufficientStockError(
                    f'Product "{product.name}" is not available in the requested quantity.',
                    product_id=product_id,
                )

        snapshots = []
        for line in requests:
            product = products[line.product_id]
            snapshots.append(
                ItemSnapshot(
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    quantity=line.quantity,
                    image=product.primary_image_url,
                )
            )

        pricing = calculate_order_pricing(
            [PricingLine(unit_price=item.price, quantity=item.quantity) for item in snapshots],
            cmd.pricing_policy or PricingPolicy.from_settings(),
        )
        order = OrderService.create_order(
            user=cmd.user,
            items=snapshots,
            address=address,
            pricing=pricing,
            payment_method=cmd.payment_method,
            notes=cmd.notes or "",
        )
        logger.info(
            "order.created",
            extra={"order_id": order.id, "user_id": cmd.user.pk, "total_price": str(order.total_price)},
        )
        return order
