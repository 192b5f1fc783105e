"""Unit tests for request validation and JSON serialization."""

from pydantic import ValidationError
import pytest

from product_catalog.schemas import ErrorResponse, ProductPayload, dump_product, validate_product_payload


VALID_BODY = {
    "productKey": "P1",
    "productSubcategoryKey": "1",
    "productSKU": "BK-1",
    "productName": "Bike",
    "modelName": "Road-150",
    "productDescription": "Aluminum road bike",
    "productColor": "Red",
    "productSize": "58",
    "productStyle": "U",
    "productCost": 20.0,
    "productPrice": 30.0,
}


def _error_fields(exc_info) -> set[str]:
    return {error["loc"][0] for error in exc_info.value.errors()}


@pytest.mark.unit
class TestValidateProductPayload:
    def test_valid_body_builds_product(self):
        product = validate_product_payload(VALID_BODY)

        assert product.key == "P1"
        assert product.sku == "BK-1"
        assert product.model_name == "Road-150"
        assert product.cost == 20.0
        assert product.price == 30.0

    def test_unknown_fields_are_ignored(self):
        product = validate_product_payload({**VALID_BODY, "warehouse": "north"})

        assert product.name == "Bike"

    @pytest.mark.parametrize("field", sorted(VALID_BODY))
    def test_every_field_is_required(self, field):
        body = {k: v for k, v in VALID_BODY.items() if k != field}

        with pytest.raises(ValidationError) as exc_info:
            validate_product_payload(body)

        assert field in _error_fields(exc_info)

    @pytest.mark.parametrize(
        "field",
        [
            "productKey",
            "productSubcategoryKey",
            "productSKU",
            "productName",
            "modelName",
            "productDescription",
            "productColor",
            "productSize",
            "productStyle",
        ],
    )
    def test_empty_strings_are_rejected(self, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_product_payload({**VALID_BODY, field: ""})

        assert field in _error_fields(exc_info)

    @pytest.mark.parametrize("value", [0, -1, -0.01])
    @pytest.mark.parametrize("field", ["productCost", "productPrice"])
    def test_money_must_be_positive(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_product_payload({**VALID_BODY, field: value})

        assert field in _error_fields(exc_info)

    def test_price_must_be_numeric(self):
        with pytest.raises(ValidationError):
            validate_product_payload({**VALID_BODY, "productPrice": "expensive"})

    def test_missing_and_invalid_fields_are_reported_together(self):
        body = {**VALID_BODY, "productName": "", "productCost": -5}
        del body["productSKU"]

        with pytest.raises(ValidationError) as exc_info:
            validate_product_payload(body)

        assert _error_fields(exc_info) == {"productName", "productCost", "productSKU"}

    @pytest.mark.parametrize("body", [None, [], "P1", 42])
    def test_non_object_bodies_are_rejected(self, body):
        with pytest.raises(ValidationError):
            validate_product_payload(body)

    def test_python_field_names_are_accepted(self):
        payload = ProductPayload(
            key="P1",
            subcategory_key="1",
            sku="BK-1",
            name="Bike",
            model_name="Road",
            description="Desc",
            color="Red",
            size="58",
            style="U",
            cost=1.0,
            price=2.0,
        )

        assert payload.to_product().model_name == "Road"


@pytest.mark.unit
def test_dump_product_uses_camel_case_keys():
    product = validate_product_payload(VALID_BODY)

    assert dump_product(product) == VALID_BODY


@pytest.mark.unit
def test_error_response_omits_empty_details():
    payload = ErrorResponse(code=404, message="product not found")

    assert payload.model_dump(exclude_none=True) == {"code": 404, "message": "product not found"}
