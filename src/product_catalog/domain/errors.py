"""Errors raised by catalog store operations."""


class CatalogError(Exception):
    """Base class for catalog store failures."""


class ProductNotFound(CatalogError, LookupError):
    """No product with the requested key exists."""

    def __init__(self, key: str):
        self.key = key
        super().__init__("product not found")


class StoreError(CatalogError):
    """Loading or saving the catalog file failed."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(message)
