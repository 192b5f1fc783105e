"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Complete test environment that overrides every config value
TEST_ENV = {
    "DATA_FILE": "archives/test_products.csv",
    "CREATE_DATA_FILE_IF_MISSING": "false",
    "HOST": "127.0.0.1",
    "PORT": "8080",
    "DEFAULT_PAGE_SIZE": "10",
    "LOG_LEVEL": "info",
    "LOG_JSON": "false",
    "LOG_FILE": "",
    "ACCESS_LOG": "false",
    "MASK_ERROR_DETAILS": "false",
    "SERVICE_NAME": "product-catalog-test",
    "OTLP_ENABLED": "false",
    "OTLP_PROTOCOL": "grpc",
    "OTLP_ENDPOINT": "http://localhost:4317",
}


for key, value in TEST_ENV.items():
    os.environ[key] = value

from product_catalog.adapters.csv_codec import HEADER  # noqa: E402
from product_catalog.config import Settings, get_settings  # noqa: E402
from product_catalog.domain.model import Product  # noqa: E402


SAMPLE_ROWS = [
    ["P1", "1", "BK-1", "Bike", "Road-150", "Aluminum road bike", "Red", "58", "U", "20.0000", "30.0000"],
    ["P2", "2", "LK-1", "Lock", "Cable Lock", "Steel cable lock", "Black", "0", "U", "4.5000", "10.0000"],
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset environment variables and the cached settings before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def product_factory():
    """Build products with sensible defaults; keyword arguments override fields."""

    def _make(key: str = "P1", **overrides) -> Product:
        fields = {
            "key": key,
            "subcategory_key": "1",
            "sku": f"SKU-{key}",
            "name": f"Product {key}",
            "model_name": "Model",
            "description": "Sample product",
            "color": "Silver",
            "size": "M",
            "style": "U",
            "cost": 1.0,
            "price": 2.0,
        }
        fields.update(overrides)
        return Product(**fields)

    return _make


def write_catalog(path: Path, rows: list[list[str]]) -> Path:
    lines = [",".join(HEADER)] + [",".join(row) for row in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def catalog_writer():
    """Expose ``write_catalog`` to tests that need custom file contents."""
    return write_catalog


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    """Catalog file holding the two sample products P1 (Bike, 30) and P2 (Lock, 10)."""
    return write_catalog(tmp_path / "products.csv", SAMPLE_ROWS)


@pytest.fixture
def empty_catalog_file(tmp_path: Path) -> Path:
    return write_catalog(tmp_path / "empty.csv", [])


@pytest.fixture
def settings(catalog_file: Path) -> Settings:
    return Settings(data_file=str(catalog_file))
