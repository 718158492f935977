from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.orders.application.use_cases.cancel_order import CancelOrderCommand, CancelOrderUseCase
from apps.orders.application.use_cases.get_order import GetOrderCommand, GetOrderUseCase
from apps.orders.application.use_cases.list_orders import (
    ListAllOrdersCommand,
    ListAllOrdersUseCase,
    ListOrdersCommand,
    ListOrdersUseCase,
)
from apps.orders.application.use_cases.order_stats import OrderStatsCommand, OrderStatsUseCase
from apps.orders.application.use_cases.update_order_status import (
    UpdateOrderStatusCommand,
    UpdateOrderStatusUseCase,
)
from apps.orders.domain.errors import (
    OrderAccessDeniedError,
    OrderDomainError,
    OrderNotFoundError,
    ProductNotFoundError,
)
from apps.orders.interfaces.api.serializers import (
    AdminOrderListQuerySerializer,
    OrderListQuerySerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
    OrderSummarySerializer,
)
from storefront.api_responses import error, invalid, success


def order_error(exc: OrderDomainError) -> Response:
    if isinstance(exc, (OrderNotFoundError, ProductNotFoundError)):
        http_status = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, OrderAccessDeniedError):
        http_status = status.HTTP_403_FORBIDDEN
    else:
        http_status = status.HTTP_400_BAD_REQUEST
    return error(message=str(exc), code=exc.code, field=getattr(exc, "field", None), http_status=http_status)


class OrderListAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = OrderListQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return invalid(serializer)
        data = serializer.validated_data
        try:
            result = ListOrdersUseCase.execute(
                ListOrdersCommand(user=request.user, status=data["status"], page=data["page"], limit=data["limit"])
            )
        except OrderDomainError as exc:
            return order_error(exc)
        return success(
            data={
                "orders": OrderSerializer(result.orders, many=True).data,
                "pagination": result.page_info.as_dict(total_key="total_orders"),
            }
        )


class OrderDetailAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, order_id: int):
        try:
            order = GetOrderUseCase.execute(GetOrderCommand(order_id=order_id, actor=request.user))
        except OrderDomainError as exc:
            return order_error(exc)
        return success(data={"order": OrderSerializer(order).data})


class OrderCancelAPI(APIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, order_id: int):
        try:
            order = CancelOrderUseCase.execute(CancelOrderCommand(order_id=order_id, actor=request.user))
        except OrderDomainError as exc:
            return order_error(exc)
        return success(data={"order": OrderSummarySerializer(order).data})

    post = put


class AdminOrderListAPI(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        serializer = AdminOrderListQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return invalid(serializer)
        data = serializer.validated_data
        try:
            result = ListAllOrdersUseCase.execute(
                ListAllOrdersCommand(
                    actor=request.user,
                    status=data["status"],
                    sort_by=data["sort_by"],
                    sort_order=data["sort_order"],
                    page=data["page"],
                    limit=data["limit"],
                )
            )
        except OrderDomainError as exc:
            return order_error(exc)
        return success(
            data={
                "orders": OrderSerializer(result.orders, many=True).data,
                "pagination": result.page_info.as_dict(total_key="total_orders"),
                "statistics": {
                    "total_revenue": str(result.statistics["total_revenue"]),
                    "average_order_value": str(result.statistics["average_order_value"]),
                    "total_orders": result.statistics["total_orders"],
                },
            }
        )


class AdminOrderStatsAPI(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        try:
            result = OrderStatsUseCase.execute(OrderStatsCommand(actor=request.user))
        except OrderDomainError as exc:
            return order_error(exc)
        return success(
            data={
                "status_stats": [
                    {**row, "total_revenue": str(row["total_revenue"] or 0)} for row in result.status_stats
                ],
                "recent_orders": OrderSummarySerializer(result.recent_orders, many=True).data,
                "monthly_stats": [
                    {**row, "total_revenue": str(row["total_revenue"] or 0)} for row in result.monthly_stats
                ],
            }
        )


class OrderStatusUpdateAPI(APIView):
    permission_classes = [IsAdminUser]

    def put(self, request, order_id: int):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return error(
                message="Valid status is required.",
                code="invalid_status",
                details=serializer.errors,
            )
        data = serializer.validated_data
        try:
            order = UpdateOrderStatusUseCase.execute(
                UpdateOrderStatusCommand(
                    order_id=order_id,
                    actor=request.user,
                    status=data["status"],
                    tracking_number=data["tracking_number"],
                )
            )
        except OrderDomainError as exc:
            return order_error(exc)
        return success(data={"order": OrderSummarySerializer(order).data})
