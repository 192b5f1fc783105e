"""Centralized configuration for the product catalog service using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Storage
    data_file: str = Field(
        default="archives/AdventureWorks_Products.csv",
        min_length=1,
        description="CSV file holding the product catalog",
    )
    create_data_file_if_missing: bool = Field(
        default=False,
        description="Write a header-only catalog at startup when the data file does not exist",
    )

    # Server settings
    host: str = Field(default="0.0.0.0", description="HTTP bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP port")

    # Listing
    default_page_size: int = Field(default=10, ge=1, description="Page size used when pageSize is absent or invalid")

    # Logging
    log_level: str = Field(default="info", pattern=r"(?i)^(debug|info|warning|error|critical)$")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")
    log_file: str = Field(default="", description="Optional file that receives a copy of every log line")
    access_log: bool = Field(default=False, description="Keep uvicorn access logs enabled")

    # Security
    mask_error_details: bool = Field(
        default=False, description="Replace storage error messages in 500 responses with a generic message"
    )

    # Tracing
    service_name: str = Field(default="product-catalog", description="OpenTelemetry service.name")
    otlp_enabled: bool = Field(default=False, description="Export spans to an OTLP collector")
    otlp_protocol: Literal["http", "grpc"] = Field(default="grpc", description="OTLP transport protocol")
    otlp_endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP collector endpoint (HTTP exporters expect the /v1/traces path)",
    )

    def data_path(self) -> Path:
        """Return the catalog file as an expanded path."""
        return Path(self.data_file).expanduser()

    def log_path(self) -> Path | None:
        """Return the log file path, or None when file logging is disabled."""
        if not self.log_file.strip():
            return None
        return Path(self.log_file).expanduser()

    def is_debug(self) -> bool:
        return self.log_level.lower() == "debug"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retrieve a cached instance of Settings to avoid repeated env parsing."""
    return Settings()


__all__ = ["Settings", "get_settings"]
