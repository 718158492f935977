from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Product(models.Model):
    CATEGORY_ELECTRONICS = "Electronics"
    CATEGORY_CLOTHING = "Clothing"
    CATEGORY_BOOKS = "Books"
    CATEGORY_HOME_GARDEN = "Home & Garden"
    CATEGORY_SPORTS = "Sports"
    CATEGORY_TOYS = "Toys"
    CATEGORY_HEALTH_BEAUTY = "Health & Beauty"
    CATEGORY_AUTOMOTIVE = "Automotive"
    CATEGORY_FOOD_BEVERAGES = "Food & Beverages"
    CATEGORY_OTHER = "Other"

    CATEGORY_CHOICES = [
        (CATEGORY_ELECTRONICS, "Electronics"),
        (CATEGORY_CLOTHING, "Clothing"),
        (CATEGORY_BOOKS, "Books"),
        (CATEGORY_HOME_GARDEN, "Home & Garden"),
        (CATEGORY_SPORTS, "Sports"),
        (CATEGORY_TOYS, "Toys"),
        (CATEGORY_HEALTH_BEAUTY, "Health & Beauty"),
        (CATEGORY_AUTOMOTIVE, "Automotive"),
        (CATEGORY_FOOD_BEVERAGES, "Food & Beverages"),
        (CATEGORY_OTHER, "Other"),
    ]

    name = models.CharField(max_length=100)
    description = models.TextField(max_length=1000)
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    original_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    category = models.CharField(max_length=32, choices=CATEGORY_CHOICES)
    brand = models.CharField(max_length=100, blank=True, default="")
    # [{"url": ..., "alt": ..., "is_primary": bool}, ...]
    images = models.JSONField(default=list, blank=True)
    stock = models.PositiveIntegerField(default=0)
    sold = models.PositiveIntegerField(default=0)
    rating_average = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    rating_count = models.PositiveIntegerField(default=0)
    tags = models.CharField(max_length=500, blank=True, default="")
    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)
    discount = models.PositiveSmallIntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["category", "is_active"], name="product_category_active_idx"),
            models.Index(fields=["price"], name="product_price_idx"),
            models.Index(fields=["-rating_average"], name="product_rating_idx"),
            models.Index(fields=["is_featured", "is_active"], name="product_featured_idx"),
            models.Index(fields=["-created_at"], name="product_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.category})"

    @property
    def discounted_price(self) -> Decimal:
        if self.discount > 0:
            return (self.price * (Decimal(100) - Decimal(self.discount)) / Decimal(100)).quantize(Decimal("0.01"))
        return self.price

    @property
    def primary_image(self) -> dict | None:
        images = self.images or []
        for image in images:
            if image.get("is_primary"):
                return image
        return images[0] if images else None

    @property
    def primary_image_url(self) -> str:
        image = self.primary_image
        return (image or {}).get("url", "") or ""

    @property
    def tag_list(self) -> list[str]:
        return [tag.strip() for tag in (self.tags or "").split(",") if tag.strip()]
