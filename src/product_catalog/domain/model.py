"""Domain model - the product record.

The catalog has a single entity. A ``Product`` is rebuilt from storage on every
store operation and discarded once the operation returns, so it carries no
behavior beyond its attributes.

Why a Pydantic dataclass?
- Field types are coerced when rows are decoded from text
- Equality compares every attribute, which is what round-trip checks need
- Frozen instances cannot be mutated behind the store's back
"""

from pydantic.dataclasses import dataclass


@dataclass(frozen=True)
class Product:
    """A product row from the catalog file.

    ``key`` identifies the product but is not guaranteed unique; the store
    always resolves a key to the first matching row.
    """

    key: str
    subcategory_key: str
    sku: str
    name: str
    model_name: str
    description: str
    color: str
    size: str
    style: str
    cost: float
    price: float
