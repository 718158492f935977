from django.urls import path

from .views import (
    CategoryProductsAPI,
    FeaturedProductsAPI,
    ProductCategoriesAPI,
    ProductDetailAPI,
    ProductListCreateAPI,
)

urlpatterns = [
    path("products/", ProductListCreateAPI.as_view(), name="api_products"),
    path("products/featured/", FeaturedProductsAPI.as_view(), name="api_products_featured"),
    path("products/categories/", ProductCategoriesAPI.as_view(), name="api_products_categories"),
    path("products/category/<str:category>/", CategoryProductsAPI.as_view(), name="api_products_by_category"),
    path("products/<int:product_id>/", ProductDetailAPI.as_view(), name="api_product_detail"),
]
