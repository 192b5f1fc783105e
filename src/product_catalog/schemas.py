"""Request and response shapes for the product HTTP API.

Validation is a plain function over a Pydantic model; there is no shared
validator object to configure.
"""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field

from product_catalog.domain.model import Product


NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveAmount = Annotated[float, Field(gt=0, allow_inf_nan=False)]


class ProductPayload(BaseModel):
    """JSON body accepted by create and update, and returned by every product route."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())

    key: NonEmptyStr = Field(alias="productKey")
    subcategory_key: NonEmptyStr = Field(alias="productSubcategoryKey")
    sku: NonEmptyStr = Field(alias="productSKU")
    name: NonEmptyStr = Field(alias="productName")
    model_name: NonEmptyStr = Field(alias="modelName")
    description: NonEmptyStr = Field(alias="productDescription")
    color: NonEmptyStr = Field(alias="productColor")
    size: NonEmptyStr = Field(alias="productSize")
    style: NonEmptyStr = Field(alias="productStyle")
    cost: PositiveAmount = Field(alias="productCost")
    price: PositiveAmount = Field(alias="productPrice")

    def to_product(self) -> Product:
        return Product(**self.model_dump())


class ErrorResponse(BaseModel):
    code: int
    message: str
    details: list[dict[str, Any]] | None = None


def validate_product_payload(data: Any) -> Product:
    """Validate a decoded JSON body and build the product it describes.

    Raises:
        pydantic.ValidationError: missing fields, empty strings, or a cost or
            price that is not a positive number
    """
    return ProductPayload.model_validate(data).to_product()


def dump_product(product: Product) -> dict[str, Any]:
    """Serialize a product using the API's camelCase field names."""
    return {
        "productKey": product.key,
        "productSubcategoryKey": product.subcategory_key,
        "productSKU": product.sku,
        "productName": product.name,
        "modelName": product.model_name,
        "productDescription": product.description,
        "productColor": product.color,
        "productSize": product.size,
        "productStyle": product.style,
        "productCost": product.cost,
        "productPrice": product.price,
    }
