from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import StrEnum

from .errors import CatalogValidationError

CATEGORIES: tuple[str, ...] = (
    "Electronics",
    "Clothing",
    "Books",
    "Home & Garden",
    "Sports",
    "Toys",
    "Health & Beauty",
    "Automotive",
    "Food & Beverages",
    "Other",
)

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50


class ProductSort(StrEnum):
    PRICE_ASC = "price"
    PRICE_DESC = "-price"
    NAME_ASC = "name"
    NAME_DESC = "-name"
    NEWEST_LAST = "createdAt"
    NEWEST_FIRST = "-createdAt"
    RATING_ASC = "ratings"
    RATING_DESC = "-ratings"


_SORT_COLUMNS: dict[str, str] = {
    "price": "price",
    "name": "name",
    "createdAt": "created_at",
    "ratings": "rating_average",
}


def sort_to_ordering(sort: ProductSort | None) -> str:
    if sort is None:
        return "-created_at"
    raw = str(sort)
    descending = raw.startswith("-")
    column = _SORT_COLUMNS[raw.lstrip("-")]
    return f"-{column}" if descending else column


def parse_decimal(raw, *, field_name: str, allow_none: bool = False) -> Decimal | None:
    if raw is None or raw == "":
        if allow_none:
            return None
        raise CatalogValidationError(f"{field_name} is required.", field=field_name)
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise CatalogValidationError(f"{field_name} must be a number.", field=field_name) from exc
    if not value.is_finite():
        raise CatalogValidationError(f"{field_name} must be a number.", field=field_name)
    return value


def validate_price(raw, *, field_name: str = "price") -> Decimal:
    price = parse_decimal(raw, field_name=field_name)
    if price < 0:
        raise CatalogValidationError("Price cannot be negative.", field=field_name)
    return price.quantize(Decimal("0.01"))


def validate_category(raw: str) -> str:
    category = (raw or "").strip()
    if category not in CATEGORIES:
        raise CatalogValidationError("Invalid category.", field="category")
    return category


def validate_discount(raw) -> int:
    try:
        discount = int(raw or 0)
    except (TypeError, ValueError) as exc:
        raise CatalogValidationError("Discount must be an integer.", field="discount") from exc
    if discount < 0 or discount > 100:
        raise CatalogValidationError("Discount must be between 0 and 100.", field="discount")
    return discount


def validate_stock(raw) -> int:
    try:
        stock = int(raw)
    except (TypeError, ValueError) as exc:
        raise CatalogValidationError("Stock must be a non-negative integer.", field="stock") from exc
    if stock < 0:
        raise CatalogValidationError("Stock must be a non-negative integer.", field="stock")
    return stock


@dataclass(frozen=True)
class ProductDraft:
    """Validated admin input for creating or replacing a product."""

    name: str
    description: str
    price: Decimal
    category: str
    stock: int
    images: list[dict]
    original_price: Decimal | None = None
    brand: str = ""
    tags: str = ""
    discount: int = 0
    is_featured: bool = False

    @classmethod
    def build(cls, raw: dict) -> "ProductDraft":
        name = (raw.get("name") or "").strip()
        if not name:
            raise CatalogValidationError("Product name is required.", field="name")
        if len(name) > 100:
            raise CatalogValidationError("Product name cannot exceed 100 characters.", field="name")

        description = (raw.get("description") or "").strip()
        if not description:
            raise CatalogValidationError("Product description is required.", field="description")
        if len(description) > 1000:
            raise CatalogValidationError("Description cannot exceed 1000 characters.", field="description")

        images = list(raw.get("images") or [])
        if not images:
            raise CatalogValidationError("At least one image is required.", field="images")
        normalized_images = []
        for image in images:
            url = (image.get("url") or "").strip() if isinstance(image, dict) else ""
            if not url:
                raise CatalogValidationError("Each image must have a valid URL.", field="images")
            normalized_images.append(
                {"url": url, "alt": image.get("alt") or "", "is_primary": bool(image.get("is_primary"))}
            )

        original_price = raw.get("original_price")
        tags = raw.get("tags") or ""
        if isinstance(tags, (list, tuple)):
            tags = ",".join(str(tag).strip() for tag in tags if str(tag).strip())

        return cls(
            name=name,
            description=description,
            price=validate_price(raw.get("price")),
            category=validate_category(raw.get("category")),
            stock=validate_stock(raw.get("stock")),
            images=normalized_images,
            original_price=(
                validate_price(original_price, field_name="original_price")
                if original_price not in (None, "")
                else None
            ),
            brand=(raw.get("brand") or "").strip(),
            tags=tags,
            discount=validate_discount(raw.get("discount")),
            is_featured=bool(raw.get("is_featured", False)),
        )


@dataclass(frozen=True)
class ProductQuery:
    category: str = ""
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    search: str = ""
    sort: ProductSort | None = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    include_inactive: bool = False
    featured_only: bool = False
    search_terms: tuple[str, ...] = field(default=(), compare=False)

    @classmethod
    def build(
        cls,
        *,
        category: str = "",
        min_price=None,
        max_price=None,
        search: str = "",
        sort: str | None = None,
        page=1,
        limit=DEFAULT_PAGE_SIZE,
        include_inactive: bool = False,
        featured_only: bool = False,
    ) -> "ProductQuery":
        try:
            page = int(page or 1)
        except (TypeError, ValueError) as exc:
            raise CatalogValidationError("Page must be a positive integer.", field="page") from exc
        if page < 1:
            raise CatalogValidationError("Page must be a positive integer.", field="page")

        try:
            limit = int(limit or DEFAULT_PAGE_SIZE)
        except (TypeError, ValueError) as exc:
            raise CatalogValidationError("Limit must be between 1 and 50.", field="limit") from exc
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise CatalogValidationError("Limit must be between 1 and 50.", field="limit")

        low = parse_decimal(min_price, field_name="min_price", allow_none=True)
        high = parse_decimal(max_price, field_name="max_price", allow_none=True)
        if low is not None and low < 0:
            raise CatalogValidationError("Min price must be non-negative.", field="min_price")
        if high is not None and high < 0:
            raise CatalogValidationError("Max price must be non-negative.", field="max_price")

        parsed_sort = None
        if sort:
            try:
                parsed_sort = ProductSort(sort)
            except ValueError as exc:
                raise CatalogValidationError("Invalid sort option.", field="sort") from exc

        search = (search or "").strip()
        return cls(
            category=(category or "").strip(),
            min_price=low,
            max_price=high,
            search=search,
            sort=parsed_sort,
            page=page,
            limit=limit,
            include_inactive=include_inactive,
            featured_only=featured_only,
            search_terms=tuple(term for term in search.split() if term),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PageInfo:
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def as_dict(self, *, total_key: str = "total") -> dict:
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            total_key: self.total,
            "has_next_page": self.has_next,
            "has_prev_page": self.has_prev,
        }
