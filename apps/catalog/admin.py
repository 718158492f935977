from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "category", "price", "discount", "stock", "sold", "is_active", "is_featured")
    search_fields = ("name", "brand", "tags")
    list_filter = ("category", "is_active", "is_featured")
    readonly_fields = ("sold", "rating_average", "rating_count", "created_at", "updated_at")
