from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .errors import OrderValidationError

CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PricingPolicy:
    tax_rate: Decimal = Decimal("0.08")
    free_shipping_threshold: Decimal = Decimal("100")
    flat_shipping_price: Decimal = Decimal("10")

    @classmethod
    def from_settings(cls) -> "PricingPolicy":
        from django.conf import settings

        return cls(
            tax_rate=Decimal(str(getattr(settings, "ORDER_TAX_RATE", cls.tax_rate))),
            free_shipping_threshold=Decimal(
                str(getattr(settings, "ORDER_FREE_SHIPPING_THRESHOLD", cls.free_shipping_threshold))
            ),
            flat_shipping_price=Decimal(str(getattr(settings, "ORDER_FLAT_SHIPPING_PRICE", cls.flat_shipping_price))),
        )


@dataclass(frozen=True)
class PricingLine:
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class OrderPricing:
    items_price: Decimal
    tax_price: Decimal
    shipping_price: Decimal
    total_price: Decimal


def calculate_order_pricing(
    lines: Iterable[PricingLine | tuple],
    policy: PricingPolicy | None = None,
) -> OrderPricing:
    """
    Price an order from its (unit price, quantity) lines.

    Tax is rounded to cents on its own; shipping is free strictly above the
    threshold; the total is rounded again after summing.
    """
    policy = policy or PricingPolicy()
    normalized: list[PricingLine] = []
    for index, line in enumerate(lines):
        if not isinstance(line, PricingLine):
            unit_price, quantity = line
            line = PricingLine(unit_price=Decimal(str(unit_price)), quantity=quantity)
        if not isinstance(line.quantity, int) or isinstance(line.quantity, bool) or line.quantity < 1:
            raise OrderValidationError("Quantity must be at least 1.", field=f"items[{index}].quantity")
        if line.unit_price < 0:
            raise OrderValidationError("Price cannot be negative.", field=f"items[{index}].price")
        normalized.append(line)

    if not normalized:
        raise OrderValidationError("At least one item is required.", field="items")

    items_price = round_money(sum((line.unit_price * line.quantity for line in normalized), Decimal("0")))
    tax_price = round_money(items_price * policy.tax_rate)
    shipping_price = Decimal("0.00") if items_price > policy.free_shipping_threshold else round_money(
        policy.flat_shipping_price
    )
    total_price = round_money(items_price + tax_price + shipping_price)
    return OrderPricing(
        items_price=items_price,
        tax_price=tax_price,
        shipping_price=shipping_price,
        total_price=total_price,
    )
