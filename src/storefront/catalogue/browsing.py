"""Catalogue reads for shoppers: listing, search, featured products."""

from decimal import Decimal
from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product, ProductStatus
from storefront.reviews.product_rating import ProductRating
from storefront.shared.queries import fetch_all

FEATURED_LIMIT = 8


class ProductSort(Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME = "name"
    RATING = "rating"


def _ratings() -> dict[str, float]:
    return {str(r.product_id): r.average_rating for r in fetch_all(ProductRating)}


def _matches(product: Product, term: str) -> bool:
    haystack = " ".join(filter(None, [product.name, product.description, product.brand])).lower()
    return term in haystack


def _sort(products: list[Product], sort: ProductSort, ratings: dict[str, float]) -> list[Product]:
    # Newest first is the base order; the stable sorts below keep it as tie-breaker
    products = sorted(products, key=lambda p: p.created_at, reverse=True)
    if sort == ProductSort.PRICE_ASC:
        return sorted(products, key=lambda p: Decimal(p.price))
    if sort == ProductSort.PRICE_DESC:
        return sorted(products, key=lambda p: Decimal(p.price), reverse=True)
    if sort == ProductSort.NAME:
        return sorted(products, key=lambda p: p.name.lower())
    if sort == ProductSort.RATING:
        return sorted(products, key=lambda p: ratings.get(str(p.id), 0.0), reverse=True)
    return products


def browse_products(search: str | None = None, category: str | None = None, sort: str | None = None) -> list[dict]:
    """List active products.

    A search term matches name, description or brand case-insensitively and,
    when present, takes precedence over the category filter.
    """
    try:
        order = ProductSort(sort) if sort else ProductSort.NEWEST
    except ValueError:
        raise ValidationError({"sort": [f"Unknown sort option: {sort}"]}) from None

    term = (search or "").strip().lower()
    if term:
        products = [p for p in fetch_all(Product, status=ProductStatus.ACTIVE.value) if _matches(p, term)]
    elif category:
        products = fetch_all(Product, status=ProductStatus.ACTIVE.value, category=category)
    else:
        products = fetch_all(Product, status=ProductStatus.ACTIVE.value)

    ratings = _ratings()
    return [product_view(p, ratings) for p in _sort(products, order, ratings)]


def featured_products() -> list[dict]:
    products = fetch_all(Product, status=ProductStatus.ACTIVE.value, featured=True)
    ratings = _ratings()
    return [product_view(p, ratings) for p in _sort(products, ProductSort.NEWEST, ratings)[:FEATURED_LIMIT]]


def get_product(product_id) -> dict:
    product = current_domain.repository_for(Product).find_active(product_id)
    if product is None:
        raise ObjectNotFoundError(f"Product with id {product_id} does not exist")
    return product_view(product, _ratings())


def export_products() -> list[dict]:
    """Every active product, for the admin download."""
    ratings = _ratings()
    products = fetch_all(Product, status=ProductStatus.ACTIVE.value)
    return [product_view(p, ratings) for p in sorted(products, key=lambda p: p.created_at)]


def product_view(product: Product, ratings: dict[str, float] | None = None) -> dict:
    ratings = ratings or {}
    return {
        "id": str(product.id),
        "name": product.name,
        "description": product.description,
        "price": Decimal(product.price),
        "image_url": product.image_url,
        "stock": product.stock,
        "category": product.category,
        "brand": product.brand,
        "featured": bool(product.featured),
        "average_rating": ratings.get(str(product.id), 0.0),
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }
