from __future__ import annotations

from django.db import transaction

from ..domain.errors import CatalogValidationError
from ..domain.policies import ProductDraft
from ..models import Product


class ProductService:
    @staticmethod
    def _apply_draft(product: Product, draft: ProductDraft) -> None:
        product.name = draft.name
        product.description = draft.description
        product.price = draft.price
        product.original_price = draft.original_price
        product.category = draft.category
        product.brand = draft.brand
        product.images = draft.images
        product.stock = draft.stock
        product.tags = draft.tags
        product.discount = draft.discount
        product.is_featured = draft.is_featured

    @staticmethod
    def find_product(product_id) -> Product | None:
        try:
            return Product.objects.filter(pk=int(product_id)).first()
        except (TypeError, ValueError):
            return None

    @staticmethod
    @transaction.atomic
    def create_product(*, draft: ProductDraft) -> Product:
        product = Product()
        ProductService._apply_draft(product, draft)
        product.is_active = True
        product.save()
        return product

    @staticmethod
    @transaction.atomic
    def update_product(*, product: Product, draft: ProductDraft) -> Product:
        if not product.pk:
            raise CatalogValidationError("Product must be saved before it can be updated.")
        ProductService._apply_draft(product, draft)
        product.save()
        return product

    @staticmethod
    def deactivate_product(*, product: Product) -> Product:
        """Soft delete: products are never removed, only hidden."""
        if product.is_active:
            product.is_active = False
            product.save(update_fields=["is_active", "updated_at"])
        return product
