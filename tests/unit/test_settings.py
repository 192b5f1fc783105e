"""Unit tests for environment-driven settings."""

from pathlib import Path

from pydantic import ValidationError
import pytest

from product_catalog.config import Settings, get_settings


@pytest.mark.unit
class TestSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DATA_FILE", "/srv/catalog/products.csv")
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("DEFAULT_PAGE_SIZE", "25")
        monkeypatch.setenv("MASK_ERROR_DETAILS", "true")

        settings = Settings()

        assert settings.data_file == "/srv/catalog/products.csv"
        assert settings.port == 9000
        assert settings.default_page_size == 25
        assert settings.mask_error_details is True

    def test_defaults_without_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for name in ("DATA_FILE", "PORT", "DEFAULT_PAGE_SIZE", "LOG_JSON", "SERVICE_NAME"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.data_file == "archives/AdventureWorks_Products.csv"
        assert settings.port == 8080
        assert settings.default_page_size == 10
        assert settings.log_json is True
        assert settings.service_name == "product-catalog"

    def test_dotenv_file_is_read(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("DATA_FILE", raising=False)
        (tmp_path / ".env").write_text("DATA_FILE=from-dotenv.csv\n", encoding="utf-8")

        assert Settings().data_file == "from-dotenv.csv"

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("port", 0),
            ("port", 70000),
            ("default_page_size", 0),
            ("log_level", "verbose"),
            ("otlp_protocol", "udp"),
            ("data_file", ""),
        ],
    )
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})

    def test_log_level_is_case_insensitive(self):
        assert Settings(log_level="DEBUG").is_debug()
        assert not Settings(log_level="info").is_debug()

    def test_data_path_expands_user(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))

        assert Settings(data_file="~/products.csv").data_path() == tmp_path / "products.csv"

    def test_log_path_disabled_when_blank(self):
        assert Settings(log_file="  ").log_path() is None
        assert Settings(log_file="logs/catalog.log").log_path() == Path("logs/catalog.log")


@pytest.mark.unit
def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("PORT", "9100")

    assert get_settings() is first
    get_settings.cache_clear()
    assert get_settings().port == 9100
