"""Adapters layer - storage codecs for the catalog file."""

from .csv_codec import (
    HEADER,
    CsvCodecError,
    CsvDecodeError,
    CsvEncodeError,
    decode_products,
    encode_products,
    write_empty_catalog,
)


__all__ = [
    "HEADER",
    "CsvCodecError",
    "CsvDecodeError",
    "CsvEncodeError",
    "decode_products",
    "encode_products",
    "write_empty_catalog",
]
