from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from django.db.models import Avg, Count, Sum

from apps.catalog.domain.policies import PageInfo
from apps.orders.domain.errors import OrderAccessDeniedError, OrderValidationError
from apps.orders.domain.state_machine import OrderStatus
from apps.orders.models import Order

_ADMIN_SORT_COLUMNS = {
    "createdAt": "created_at",
    "totalPrice": "total_price",
    "status": "status",
}


def _validate_page(page: int, limit: int, *, max_limit: int) -> None:
    if page < 1:
        raise OrderValidationError("Page must be a positive integer.", field="page")
    if limit < 1 or limit > max_limit:
        raise OrderValidationError(f"Limit must be between 1 and {max_limit}.", field="limit")


def _validate_status(status: str) -> str:
    if not status:
        return ""
    try:
        return OrderStatus(status).value
    except ValueError as exc:
        raise OrderValidationError("Invalid status.", field="status") from exc


@dataclass(frozen=True)
class OrderListResult:
    orders: list[Order]
    page_info: PageInfo
    statistics: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ListOrdersCommand:
    user: object
    status: str = ""
    page: int = 1
    limit: int = 10


class ListOrdersUseCase:
    @staticmethod
    def execute(cmd: ListOrdersCommand) -> OrderListResult:
        _validate_page(cmd.page, cmd.limit, max_limit=50)
        status = _validate_status(cmd.status)

        queryset = Order.objects.filter(user=cmd.user)
        if status:
            queryset = queryset.filter(status=status)
        total = queryset.count()
        offset = (cmd.page - 1) * cmd.limit
        orders = list(queryset.prefetch_related("items").order_by("-created_at", "-id")[offset : offset + cmd.limit])
        return OrderListResult(orders=orders, page_info=PageInfo(page=cmd.page, limit=cmd.limit, total=total))


@dataclass(frozen=True)
class ListAllOrdersCommand:
    actor: object
    status: str = ""
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    page: int = 1
    limit: int = 20


class ListAllOrdersUseCase:
    @staticmethod
    def execute(cmd: ListAllOrdersCommand) -> OrderListResult:
        if not getattr(cmd.actor, "is_staff", False):
            raise OrderAccessDeniedError("Admin access required.")
        _validate_page(cmd.page, cmd.limit, max_limit=100)
        status = _validate_status(cmd.status)
        column = _ADMIN_SORT_COLUMNS.get(cmd.sort_by or "createdAt")
        if column is None:
            raise OrderValidationError("Invalid sort field.", field="sort_by")
        if cmd.sort_order not in ("asc", "desc"):
            raise OrderValidationError("Invalid sort order.", field="sort_order")

        queryset = Order.objects.all()
        if status:
            queryset = queryset.filter(status=status)

        stats = queryset.aggregate(
            total_revenue=Sum("total_price"),
            average_order_value=Avg("total_price"),
            total_orders=Count("id"),
        )
        ordering = column if cmd.sort_order == "asc" else f"-{column}"
        offset = (cmd.page - 1) * cmd.limit
        orders = list(
            queryset.select_related("user")
            .prefetch_related("items")
            .order_by(ordering, "-id")[offset : offset + cmd.limit]
        )
        average = stats["average_order_value"]
        statistics = {
            "total_revenue": stats["total_revenue"] or Decimal("0"),
            "average_order_value": Decimal(average).quantize(Decimal("0.01")) if average is not None else Decimal("0"),
            "total_orders": stats["total_orders"],
        }
        return OrderListResult(
            orders=orders,
            page_info=PageInfo(page=cmd.page, limit=cmd.limit, total=stats["total_orders"]),
            statistics=statistics,
        )
