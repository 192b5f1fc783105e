"""Service layer - product store use cases.

- The store orchestrates load, transform and save for each operation
- Listing rules are pure functions shared by every store implementation
"""

from .listing import apply_listing, matches_filter, paginate, sort_products
from .product_store import AbstractProductStore, CsvProductStore, FakeProductStore


__all__ = [
    "AbstractProductStore",
    "CsvProductStore",
    "FakeProductStore",
    "apply_listing",
    "matches_filter",
    "paginate",
    "sort_products",
]
