"""Filter, sort and paginate rules for product listings."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from product_catalog.domain.model import Product


DEFAULT_SORT = "key"
SORT_FIELDS: dict[str, Callable[[Product], Any]] = {
    "price": lambda product: product.price,
    "name": lambda product: product.name,
    DEFAULT_SORT: lambda product: product.key,
}


def matches_filter(product: Product, filter_text: str) -> bool:
    """Case-insensitive substring match on name, description, color or style."""
    needle = filter_text.lower()
    return (
        needle in product.name.lower()
        or needle in product.description.lower()
        or needle in product.color.lower()
        or needle in product.style.lower()
    )


def sort_products(products: Sequence[Product], sort: str | None) -> list[Product]:
    """Return products in ascending order of ``sort``.

    ``"price"`` and ``"name"`` pick those fields; any other value, including
    ``None`` or empty, orders by key. Ties keep their input order.
    """
    return sorted(products, key=SORT_FIELDS.get(sort or DEFAULT_SORT, SORT_FIELDS[DEFAULT_SORT]))


def paginate(products: Sequence[Product], page: int, page_size: int) -> list[Product]:
    """Return the 1-based ``page`` of ``products``.

    A start offset past the end yields an empty page; the end offset is
    clamped to the sequence length.
    """
    start = (page - 1) * page_size
    if start > len(products):
        return []
    end = min(start + page_size, len(products))
    return list(products[start:end])


def apply_listing(
    products: Sequence[Product],
    *,
    page: int,
    page_size: int,
    filter_text: str | None = None,
    sort: str | None = None,
) -> list[Product]:
    """Filter, then sort, then paginate."""
    selected: Sequence[Product] = products
    if filter_text:
        selected = [product for product in products if matches_filter(product, filter_text)]
    return paginate(sort_products(selected, sort), page, page_size)
