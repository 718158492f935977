from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import OrderValidationError

_ADDRESS_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "Recipient name is required."),
    ("street", "Street address is required."),
    ("city", "City is required."),
    ("state", "State is required."),
    ("zip_code", "ZIP code is required."),
    ("country", "Country is required."),
)

MAX_QUANTITY = 1000


@dataclass(frozen=True)
class ShippingAddress:
    name: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    phone: str = ""

    @classmethod
    def build(cls, raw: Mapping[str, Any] | None) -> "ShippingAddress":
        if not raw:
            raise OrderValidationError("Shipping address is required.", field="shipping_address")
        values: dict[str, str] = {}
        for key, message in _ADDRESS_FIELDS:
            value = str(raw.get(key) or "").strip()
            if not value:
                raise OrderValidationError(message, field=f"shipping_address.{key}")
            values[key] = value
        values["phone"] = str(raw.get("phone") or "").strip()
        return cls(**values)

    def as_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class LineItemRequest:
    product_id: int
    quantity: int

    @classmethod
    def build(cls, raw: Mapping[str, Any], *, index: int = 0) -> "LineItemRequest":
        product_id = raw.get("product_id")
        if product_id in (None, ""):
            raise OrderValidationError("Product ID is required.", field=f"items[{index}].product_id")
        try:
            product_id = int(product_id)
        except (TypeError, ValueError) as exc:
            raise OrderValidationError("Invalid product ID.", field=f"items[{index}].product_id") from exc

        quantity = raw.get("quantity")
        if isinstance(quantity, bool):
            raise OrderValidationError("Quantity must be at least 1.", field=f"items[{index}].quantity")
        try:
            quantity = int(quantity)
        except (TypeError, ValueError) as exc:
            raise OrderValidationError("Quantity must be at least 1.", field=f"items[{index}].quantity") from exc
        if quantity < 1:
            raise OrderValidationError("Quantity must be at least 1.", field=f"items[{index}].quantity")
        if quantity > MAX_QUANTITY:
            raise OrderValidationError(
                f"Quantity must be {MAX_QUANTITY} or fewer.", field=f"items[{index}].quantity"
            )
        return cls(product_id=product_id, quantity=quantity)


def build_line_items(raw_items) -> list[LineItemRequest]:
    items = list(raw_items or [])
    if not items:
        raise OrderValidationError("Items array is required.", field="items")
    return [LineItemRequest.build(item, index=index) for index, item in enumerate(items)]
