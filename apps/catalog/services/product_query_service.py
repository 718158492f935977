from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from operator import add, or_

from django.db.models import Case, Count, IntegerField, Q, QuerySet, Value, When

from ..domain.policies import PageInfo, ProductQuery, sort_to_ordering
from ..models import Product

# Relevance weight per field a search term matches in.
_NAME_WEIGHT = 3
_TAGS_WEIGHT = 2
_DESCRIPTION_WEIGHT = 1


@dataclass(frozen=True)
class ProductPage:
    items: list[Product]
    page_info: PageInfo


def visible_products(*, include_inactive: bool = False) -> QuerySet[Product]:
    queryset = Product.objects.all()
    if not include_inactive:
        queryset = queryset.filter(is_active=True, stock__gt=0)
    return queryset


def _apply_search(queryset: QuerySet[Product], terms: tuple[str, ...]) -> QuerySet[Product]:
    matches = []
    scores = []
    for term in terms:
        matches.append(Q(name__icontains=term) | Q(tags__icontains=term) | Q(description__icontains=term))
        scores.append(
            Case(
                When(name__icontains=term, then=Value(_NAME_WEIGHT)),
                When(tags__icontains=term, then=Value(_TAGS_WEIGHT)),
                When(description__icontains=term, then=Value(_DESCRIPTION_WEIGHT)),
                default=Value(0),
                output_field=IntegerField(),
            )
        )
    return queryset.filter(reduce(or_, matches)).annotate(relevance=reduce(add, scores))


def build_queryset(query: ProductQuery) -> QuerySet[Product]:
    queryset = visible_products(include_inactive=query.include_inactive)
    if query.category:
        queryset = queryset.filter(category=query.category)
    if query.featured_only:
        queryset = queryset.filter(is_featured=True)
    if query.min_price is not None:
        queryset = queryset.filter(price__gte=query.min_price)
    if query.max_price is not None:
        queryset = queryset.filter(price__lte=query.max_price)

    ordering = [sort_to_ordering(query.sort)]
    if query.search_terms:
        queryset = _apply_search(queryset, query.search_terms)
        ordering.insert(0, "-relevance")
    ordering.append("-id")
    return queryset.order_by(*ordering)


def search_products(query: ProductQuery) -> ProductPage:
    queryset = build_queryset(query)
    total = queryset.count()
    items = list(queryset[query.offset : query.offset + query.limit])
    return ProductPage(items=items, page_info=PageInfo(page=query.page, limit=query.limit, total=total))


def products_in_category(category: str, *, page: int = 1, limit: int = 12, sort: str | None = None) -> ProductPage:
    return search_products(ProductQuery.build(category=category, page=page, limit=limit, sort=sort))


def featured_products(limit: int = 8) -> list[Product]:
    return list(
        visible_products()
        .filter(is_featured=True)
        .order_by("-rating_average", "-sold", "-id")[: max(int(limit), 0)]
    )


def category_counts() -> list[dict]:
    rows = (
        visible_products()
        .values("category")
        .annotate(count=Count("id"))
        .order_by("-count", "category")
    )
    return [{"name": row["category"], "count": row["count"]} for row in rows]
