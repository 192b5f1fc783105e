"""CSV-backed product catalog served over HTTP."""

__version__ = "0.1.0"
