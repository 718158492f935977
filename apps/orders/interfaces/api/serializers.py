from __future__ import annotations

from rest_framework import serializers

from apps.orders.domain.state_machine import OrderStatus
from apps.orders.models import Order, OrderItem

STATUS_CHOICES = [status.value for status in OrderStatus]


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=1000)


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    zip_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")


class OrderCreateInputSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    shipping_address = ShippingAddressSerializer()
    payment_method = serializers.ChoiceField(
        choices=["card", "paypal", "bank_transfer"], required=False, default="card"
    )
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class OrderListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=50, required=False, default=10)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, allow_blank=True, default="")


class AdminOrderListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, allow_blank=True, default="")
    sort_by = serializers.ChoiceField(choices=["createdAt", "totalPrice", "status"], required=False, default="createdAt")
    sort_order = serializers.ChoiceField(choices=["asc", "desc"], required=False, default="desc")


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    tracking_number = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product_id", "name", "price", "quantity", "image"]


class OrderSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    shipping_address = serializers.DictField(read_only=True)
    total_items = serializers.IntegerField(read_only=True)
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user_id",
            "items",
            "total_items",
            "shipping_address",
            "payment_method",
            "payment_result",
            "payment_intent_id",
            "items_price",
            "tax_price",
            "shipping_price",
            "total_price",
            "is_paid",
            "paid_at",
            "is_delivered",
            "delivered_at",
            "status",
            "tracking_number",
            "notes",
            "created_at",
            "updated_at",
        ]


class OrderSummarySerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "is_paid",
            "paid_at",
            "total_price",
            "tracking_number",
            "is_delivered",
            "delivered_at",
        ]
