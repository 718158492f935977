from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "name", "price", "quantity", "image")
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "order_number", "user", "status", "is_paid", "total_price", "created_at")
    search_fields = ("id", "payment_intent_id", "user__username", "user__email", "tracking_number")
    list_filter = ("status", "is_paid", "is_delivered", "payment_method")
    list_select_related = ("user",)
    readonly_fields = (
        "items_price",
        "tax_price",
        "shipping_price",
        "total_price",
        "payment_intent_id",
        "payment_provider",
        "payment_result",
        "is_paid",
        "paid_at",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline]
