from django.urls import path

from .views import (
    AdminOrderListAPI,
    AdminOrderStatsAPI,
    OrderCancelAPI,
    OrderDetailAPI,
    OrderListAPI,
    OrderStatusUpdateAPI,
)

urlpatterns = [
    path("orders/", OrderListAPI.as_view(), name="api_orders"),
    path("orders/admin/all/", AdminOrderListAPI.as_view(), name="api_orders_admin_all"),
    path("orders/admin/stats/", AdminOrderStatsAPI.as_view(), name="api_orders_admin_stats"),
    path("orders/<int:order_id>/", OrderDetailAPI.as_view(), name="api_order_detail"),
    path("orders/<int:order_id>/cancel/", OrderCancelAPI.as_view(), name="api_order_cancel"),
    path("orders/<int:order_id>/status/", OrderStatusUpdateAPI.as_view(), name="api_order_status"),
]
