"""CSV codec for the product catalog file.

The file holds one header row followed by one row per product. Column order
is fixed by ``HEADER``; cost and price are written with four decimal places.
"""

from __future__ import annotations

from collections.abc import Iterable
import contextlib
import csv
import logging
from pathlib import Path
import shutil
import sys

from product_catalog.domain.model import Product


logger = logging.getLogger(__name__)

HEADER: tuple[str, ...] = (
    "ProductKey",
    "ProductSubcategoryKey",
    "ProductSKU",
    "ProductName",
    "ModelName",
    "ProductDescription",
    "ProductColor",
    "ProductSize",
    "ProductStyle",
    "ProductCost",
    "ProductPrice",
)
FIELD_COUNT = len(HEADER)
MONEY_FORMAT = "{:.4f}"
TMP_SUFFIX = ".tmp"

# Descriptions are unbounded; the reader must accept any field the writer emits.
csv.field_size_limit(sys.maxsize)


class CsvCodecError(Exception):
    """Base class for codec failures."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class CsvDecodeError(CsvCodecError):
    """The catalog file could not be read or parsed."""


class CsvEncodeError(CsvCodecError):
    """The catalog file could not be written."""


def _parse_money(path: Path, line_num: int, column: str, raw: str) -> float:
    invalid = f"line {line_num}: invalid {column} {raw!r}"
    # float() also accepts padding and digit separators; the file format does not
    if raw != raw.strip() or "_" in raw:
        raise CsvDecodeError(path, invalid)
    try:
        return float(raw)
    except ValueError as exc:
        raise CsvDecodeError(path, invalid) from exc


def _row_to_product(path: Path, line_num: int, row: list[str]) -> Product:
    return Product(
        key=row[0],
        subcategory_key=row[1],
        sku=row[2],
        name=row[3],
        model_name=row[4],
        description=row[5],
        color=row[6],
        size=row[7],
        style=row[8],
        cost=_parse_money(path, line_num, "ProductCost", row[9]),
        price=_parse_money(path, line_num, "ProductPrice", row[10]),
    )


def _product_to_row(product: Product) -> list[str]:
    return [
        product.key,
        product.subcategory_key,
        product.sku,
        product.name,
        product.model_name,
        product.description,
        product.color,
        product.size,
        product.style,
        MONEY_FORMAT.format(product.cost),
        MONEY_FORMAT.format(product.price),
    ]


def decode_products(path: Path) -> list[Product]:
    """Read every product from ``path`` in file order.

    Rows with fewer than eleven fields are skipped. An unparseable cost or
    price aborts the whole decode.

    Raises:
        CsvDecodeError: file unreadable, header missing, malformed CSV or a
            monetary field that is not a number
    """
    products: list[Product] = []
    try:
        with path.open("r", encoding="utf-8-sig", newline="") as fp:
            reader = csv.reader(fp)
            if next(reader, None) is None:
                raise CsvDecodeError(path, "missing header row")

            for row in reader:
                if len(row) < FIELD_COUNT:
                    logger.debug("Skipping short row at line %d of %s", reader.line_num, path)
                    continue
                products.append(_row_to_product(path, reader.line_num, row))
    except csv.Error as exc:
        raise CsvDecodeError(path, f"malformed CSV: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise CsvDecodeError(path, f"cannot read file: {exc}") from exc

    return products


def encode_products(products: Iterable[Product], path: Path) -> None:
    """Replace ``path`` with a header row and one row per product.

    Rows are written to a sibling temporary file that is moved over ``path``
    once complete, so readers see either the old or the new catalog.

    Raises:
        CsvEncodeError: the destination could not be created or written
    """
    tmp_path = path.with_suffix(path.suffix + TMP_SUFFIX)
    try:
        with tmp_path.open("w", encoding="utf-8", newline="") as fp:
            writer = csv.writer(fp, lineterminator="\n")
            writer.writerow(HEADER)
            writer.writerows(_product_to_row(product) for product in products)
        shutil.move(str(tmp_path), str(path))
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise CsvEncodeError(path, f"cannot write file: {exc}") from exc


def write_empty_catalog(path: Path) -> None:
    """Create ``path`` (and its parent directories) holding only the header row."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CsvEncodeError(path, f"cannot create directory: {exc}") from exc
    encode_products([], path)
