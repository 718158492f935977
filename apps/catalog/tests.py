from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from apps.catalog.domain.errors import CatalogValidationError
from apps.catalog.domain.policies import PageInfo, ProductDraft, ProductQuery
from apps.catalog.models import Product
from apps.catalog.services.inventory_service import InventoryService, SaleOutcome
from apps.catalog.services.product_query_service import category_counts, featured_products, search_products


def make_product(**overrides) -> Product:
    values = {
        "name": "Trail Shoe",
        "description": "Everyday essential",
        "price": Decimal("50.00"),
        "category": Product.CATEGORY_SPORTS,
        "images": [{"url": "https://cdn.example.com/shoe.jpg", "alt": "", "is_primary": True}],
        "stock": 10,
    }
    values.update(overrides)
    return Product.objects.create(**values)


class ProductDraftTests(TestCase):
    def test_build_normalizes_tags_and_images(self):
        draft = ProductDraft.build(
            {
                "name": " Lamp ",
                "description": "Desk lamp",
                "price": "19.99",
                "category": "Home & Garden",
                "stock": 4,
                "images": [{"url": "https://cdn.example.com/lamp.jpg"}],
                "tags": ["desk", " light ", ""],
            }
        )
        self.assertEqual(draft.name, "Lamp")
        self.assertEqual(draft.price, Decimal("19.99"))
        self.assertEqual(draft.tags, "desk,light")
        self.assertFalse(draft.images[0]["is_primary"])

    def test_build_rejects_unknown_category(self):
        with self.assertRaises(CatalogValidationError) as ctx:
            ProductDraft.build(
                {
                    "name": "Lamp",
                    "description": "Desk lamp",
                    "price": "19.99",
                    "category": "Weapons",
                    "stock": 4,
                    "images": [{"url": "https://cdn.example.com/lamp.jpg"}],
                }
            )
        self.assertEqual(ctx.exception.field, "category")

    def test_build_requires_an_image(self):
        with self.assertRaises(CatalogValidationError) as ctx:
            ProductDraft.build(
                {"name": "Lamp", "description": "Desk lamp", "price": "1", "category": "Other", "stock": 1}
            )
        self.assertEqual(ctx.exception.field, "images")


class ProductQueryTests(TestCase):
    def test_limit_is_bounded(self):
        with self.assertRaises(CatalogValidationError):
            ProductQuery.build(limit=51)
        with self.assertRaises(CatalogValidationError):
            ProductQuery.build(page=0)

    def test_unknown_sort_is_rejected(self):
        with self.assertRaises(CatalogValidationError):
            ProductQuery.build(sort="popularity")

    def test_page_info(self):
        info = PageInfo(page=2, limit=10, total=25)
        self.assertEqual(info.total_pages, 3)
        self.assertTrue(info.has_next)
        self.assertTrue(info.has_prev)
        self.assertEqual(PageInfo(page=1, limit=10, total=0).total_pages, 0)


class ProductSearchTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.cheap = make_product(name="Basic Tee", price=Decimal("9.00"), category=Product.CATEGORY_CLOTHING)
        self.mid = make_product(name="Running Jacket", price=Decimal("80.00"), tags="running,outdoor")
        self.pricey = make_product(name="Carbon Racer", price=Decimal("240.00"), description="Running shoe")
        self.hidden = make_product(name="Old Racer", is_active=False)
        self.sold_out = make_product(name="Sold Out Racer", stock=0)

    def test_inactive_and_out_of_stock_are_hidden_from_shoppers(self):
        page = search_products(ProductQuery.build())
        ids = {product.id for product in page.items}
        self.assertNotIn(self.hidden.id, ids)
        self.assertNotIn(self.sold_out.id, ids)
        self.assertEqual(page.page_info.total, 3)

    def test_admin_listing_includes_inactive(self):
        page = search_products(ProductQuery.build(include_inactive=True))
        self.assertEqual(page.page_info.total, 5)

    def test_price_range_and_sort(self):
        page = search_products(ProductQuery.build(min_price="10", max_price="300", sort="-price"))
        self.assertEqual([p.id for p in page.items], [self.pricey.id, self.mid.id])

    def test_name_matches_rank_above_description_matches(self):
        page = search_products(ProductQuery.build(search="running"))
        self.assertEqual([p.id for p in page.items], [self.mid.id, self.pricey.id])

    def test_pagination(self):
        page = search_products(ProductQuery.build(sort="price", page=2, limit=2))
        self.assertEqual([p.id for p in page.items], [self.pricey.id])
        self.assertFalse(page.page_info.has_next)
        self.assertTrue(page.page_info.has_prev)

    def test_featured_and_category_counts(self):
        Product.objects.filter(pk=self.mid.pk).update(is_featured=True, rating_average=Decimal("4.5"))
        Product.objects.filter(pk=self.pricey.pk).update(is_featured=True, rating_average=Decimal("4.9"))
        self.assertEqual([p.id for p in featured_products(limit=5)], [self.pricey.id, self.mid.id])
        self.assertEqual(
            category_counts(),
            [{"name": "Sports", "count": 2}, {"name": "Clothing", "count": 1}],
        )


class InventoryServiceTests(TestCase):
    def test_decrement_only_when_enough_stock(self):
        product = make_product(stock=3)
        self.assertTrue(InventoryService.decrement_if_at_least(product.id, 2))
        self.assertFalse(InventoryService.decrement_if_at_least(product.id, 2))
        product.refresh_from_db()
        self.assertEqual(product.stock, 1)
        self.assertEqual(product.sold, 2)

    def test_oversell_clamps_stock_at_zero(self):
        product = make_product(stock=3)
        first = InventoryService.record_sale(product.id, 2)
        second = InventoryService.record_sale(product.id, 2)
        self.assertEqual(first.outcome, SaleOutcome.RECORDED)
        self.assertEqual(second.outcome, SaleOutcome.OVERSOLD)
        product.refresh_from_db()
        self.assertEqual(product.stock, 0)
        self.assertEqual(product.sold, 4)

    def test_missing_product_is_skipped(self):
        self.assertEqual(InventoryService.record_sale(None, 1).outcome, SaleOutcome.MISSING)
        self.assertEqual(InventoryService.record_sale(999999, 1).outcome, SaleOutcome.MISSING)


class ProductApiTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client = APIClient()
        self.admin = get_user_model().objects.create_user(username="admin", password="pass", is_staff=True)
        self.product = make_product()

    def test_list_is_public(self):
        res = self.client.get("/api/products/?sort=price")
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["pagination"]["total_products"], 1)

    def test_inactive_product_detail_is_not_found_for_shoppers(self):
        self.product.is_active = False
        self.product.save()
        res = self.client.get(f"/api/products/{self.product.id}/")
        self.assertEqual(res.status_code, 404)
        self.client.force_authenticate(self.admin)
        res = self.client.get(f"/api/products/{self.product.id}/")
        self.assertEqual(res.status_code, 200)

    def test_create_requires_admin(self):
        payload = {
            "name": "Mug",
            "description": "Ceramic mug",
            "price": "12.50",
            "category": "Home & Garden",
            "stock": 5,
            "images": [{"url": "https://cdn.example.com/mug.jpg"}],
            "tags": ["kitchen"],
        }
        res = self.client.post("/api/products/", payload, format="json")
        self.assertIn(res.status_code, (401, 403))

        self.client.force_authenticate(self.admin)
        res = self.client.post("/api/products/", payload, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.json()["data"]["product"]["tags"], ["kitchen"])

    def test_delete_is_a_soft_delete(self):
        self.client.force_authenticate(self.admin)
        res = self.client.delete(f"/api/products/{self.product.id}/")
        self.assertEqual(res.status_code, 200)
        self.product.refresh_from_db()
        self.assertFalse(self.product.is_active)

    def test_category_listing(self):
        make_product(name="Novel", category=Product.CATEGORY_BOOKS)
        res = self.client.get("/api/products/category/Books/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["pagination"]["total_products"], 1)
