"""Domain layer - product entity and store errors.

No dependencies on infrastructure: nothing here knows about CSV files,
HTTP or configuration.
"""

from product_catalog.domain.errors import CatalogError, ProductNotFound, StoreError
from product_catalog.domain.model import Product


__all__ = [
    "CatalogError",
    "Product",
    "ProductNotFound",
    "StoreError",
]
