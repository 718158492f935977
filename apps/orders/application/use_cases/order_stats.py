from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from django.db.models import Count, Sum
from django.db.models.functions import ExtractMonth, ExtractYear
from django.utils import timezone

from apps.orders.domain.errors import OrderAccessDeniedError
from apps.orders.models import Order


@dataclass(frozen=True)
class OrderStatsCommand:
    actor: object
    recent_limit: int = 5


@dataclass(frozen=True)
class OrderStatsResult:
    status_stats: list[dict]
    recent_orders: list[Order]
    monthly_stats: list[dict]


def _first_day_months_ago(now: datetime, months: int) -> datetime:
    year = now.year
    month = now.month - months
    while month < 1:
        month += 12
        year -= 1
    return now.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)


class OrderStatsUseCase:
    @staticmethod
    def execute(cmd: OrderStatsCommand) -> OrderStatsResult:
        if not getattr(cmd.actor, "is_staff", False):
            raise OrderAccessDeniedError("Admin access required.")

        status_rows = (
            Order.objects.order_by()
            .values("status")
            .annotate(count=Count("id"), total_revenue=Sum("total_price"))
            .order_by("status")
        )
        recent = list(Order.objects.select_related("user").order_by("-created_at", "-id")[: cmd.recent_limit])

        since = _first_day_months_ago(timezone.now(), 11)
        monthly_rows = (
            Order.objects.filter(created_at__gte=since)
            .annotate(year=ExtractYear("created_at"), month=ExtractMonth("created_at"))
            .order_by()
            .values("year", "month")
            .annotate(total_orders=Count("id"), total_revenue=Sum("total_price"))
            .order_by("year", "month")
        )
        return OrderStatsResult(
            status_stats=[
                {"status": row["status"], "count": row["count"], "total_revenue": row["total_revenue"]}
                for row in status_rows
            ],
            recent_orders=recent,
            monthly_stats=list(monthly_rows),
        )
