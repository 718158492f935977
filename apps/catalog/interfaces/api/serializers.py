from __future__ import annotations

from rest_framework import serializers

from apps.catalog.domain.policies import CATEGORIES, MAX_PAGE_SIZE, ProductSort
from apps.catalog.models import Product


class ProductImageSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=500)
    alt = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    is_primary = serializers.BooleanField(required=False, default=False)


class ProductListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=MAX_PAGE_SIZE, required=False, default=12)
    category = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    min_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )
    max_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )
    search = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    sort = serializers.ChoiceField(choices=[s.value for s in ProductSort], required=False, allow_blank=True, default="")


class ProductWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=1000)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    original_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    category = serializers.ChoiceField(choices=list(CATEGORIES))
    brand = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    stock = serializers.IntegerField(min_value=0)
    images = ProductImageSerializer(many=True, allow_empty=False)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False, default=list)
    discount = serializers.IntegerField(min_value=0, max_value=100, required=False, default=0)
    is_featured = serializers.BooleanField(required=False, default=False)


class ProductSerializer(serializers.ModelSerializer):
    discounted_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    primary_image = serializers.JSONField(read_only=True)
    tags = serializers.ListField(source="tag_list", read_only=True)
    ratings = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "original_price",
            "discounted_price",
            "category",
            "brand",
            "images",
            "primary_image",
            "stock",
            "sold",
            "ratings",
            "tags",
            "discount",
            "is_active",
            "is_featured",
            "created_at",
            "updated_at",
        ]

    def get_ratings(self, obj: Product) -> dict:
        return {"average": str(obj.rating_average), "count": obj.rating_count}
