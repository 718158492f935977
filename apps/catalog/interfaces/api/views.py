from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.catalog.domain.errors import CatalogValidationError
from apps.catalog.domain.policies import ProductDraft, ProductQuery
from apps.catalog.interfaces.api.serializers import (
    ProductListQuerySerializer,
    ProductSerializer,
    ProductWriteSerializer,
)
from apps.catalog.services.product_query_service import (
    ProductPage,
    category_counts,
    featured_products,
    products_in_category,
    search_products,
)
from apps.catalog.services.product_service import ProductService
from storefront.api_responses import error, invalid, success


def _page_response(page: ProductPage) -> Response:
    return success(
        data={
            "products": ProductSerializer(page.items, many=True).data,
            "pagination": page.page_info.as_dict(total_key="total_products"),
        }
    )


def _wants_inactive(request) -> bool:
    if not getattr(request.user, "is_staff", False):
        return False
    return (request.query_params.get("include_inactive") or "").lower() in ("1", "true", "yes")


class ProductListCreateAPI(APIView):
    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdminUser()]
        return [AllowAny()]

    def get(self, request):
        serializer = ProductListQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return invalid(serializer)
        data = serializer.validated_data
        try:
            query = ProductQuery.build(
                category=data["category"],
                min_price=data["min_price"],
                max_price=data["max_price"],
                search=data["search"],
                sort=data["sort"] or None,
                page=data["page"],
                limit=data["limit"],
                include_inactive=_wants_inactive(request),
            )
        except CatalogValidationError as exc:
            return error(message=str(exc), code=exc.code, field=exc.field)
        return _page_response(search_products(query))

    def post(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid(serializer)
        try:
            product = ProductService.create_product(draft=ProductDraft.build(serializer.validated_data))
        except CatalogValidationError as exc:
            return error(message=str(exc), code=exc.code, field=exc.field)
        return success(data={"product": ProductSerializer(product).data}, http_status=status.HTTP_201_CREATED)


class ProductDetailAPI(APIView):
    def get_permissions(self):
        if self.request.method in ("PUT", "DELETE"):
            return [IsAdminUser()]
        return [AllowAny()]

    def get(self, request, product_id: int):
        product = ProductService.find_product(product_id)
        if product is None:
            return error(message="Product not found.", code="product_not_found", http_status=status.HTTP_404_NOT_FOUND)
        if not product.is_active and not getattr(request.user, "is_staff", False):
            return error(
                message="Product not available.",
                code="product_not_available",
                http_status=status.HTTP_404_NOT_FOUND,
            )
        return success(data={"product": ProductSerializer(product).data})

    def put(self, request, product_id: int):
        product = ProductService.find_product(product_id)
        if product is None:
            return error(message="Product not found.", code="product_not_found", http_status=status.HTTP_404_NOT_FOUND)
        serializer = ProductWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid(serializer)
        try:
            product = ProductService.update_product(
                product=product, draft=ProductDraft.build(serializer.validated_data)
            )
        except CatalogValidationError as exc:
            return error(message=str(exc), code=exc.code, field=exc.field)
        return success(data={"product": ProductSerializer(product).data})

    def delete(self, request, product_id: int):
        product = ProductService.find_product(product_id)
        if product is None:
            return error(message="Product not found.", code="product_not_found", http_status=status.HTTP_404_NOT_FOUND)
        ProductService.deactivate_product(product=product)
        return success(data={"id": product.id, "is_active": product.is_active})


class FeaturedProductsAPI(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        try:
            limit = int(request.query_params.get("limit") or 8)
        except ValueError:
            limit = 8
        limit = min(max(limit, 1), 50)
        return success(data={"products": ProductSerializer(featured_products(limit), many=True).data})


class ProductCategoriesAPI(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        return success(data={"categories": category_counts()})


class CategoryProductsAPI(APIView):
    permission_classes = [AllowAny]

    def get(self, request, category: str):
        serializer = ProductListQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return invalid(serializer)
        data = serializer.validated_data
        try:
            page = products_in_category(category, page=data["page"], limit=data["limit"], sort=data["sort"] or None)
        except CatalogValidationError as exc:
            return error(message=str(exc), code=exc.code, field=exc.field)
        return _page_response(page)
