"""
Configuration Tests
===================

YAML loading, environment overrides and validation of Settings.
"""

import pytest
from pydantic import ValidationError

from pixelframe.config import ConfigError, Settings, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove environment overrides that would leak into tests."""
    for name in (
        "PIXELFRAME_CONFIG",
        "PIXELFRAME_USE_COMPRESSION",
        "PIXELFRAME_PNG_COMPRESSION",
        "PIXELFRAME_HOST",
        "PIXELFRAME_PORT",
        "PIXELFRAME_MAX_BODY_BYTES",
        "PIXELFRAME_LOG_LEVEL",
        "PIXELFRAME_LOG_FORMAT",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Tests for configuration loading."""

    def test_defaults(self):
        settings = Settings()

        assert settings.codec.use_compression is True
        assert settings.codec.png_compression == 6
        assert settings.server.port == 8002
        assert settings.logging.format == "text"

    def test_yaml_file(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "codec:\n"
            "  use_compression: false\n"
            "  png_compression: 9\n"
            "server:\n"
            "  port: 9100\n"
        )

        settings = load_config(str(config_file))

        assert settings.codec.use_compression is False
        assert settings.codec.png_compression == 9
        assert settings.server.port == 9100

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("logging:\n  level: DEBUG\n")
        monkeypatch.setenv("PIXELFRAME_CONFIG", str(config_file))

        assert load_config().logging.level == "DEBUG"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("codec:\n  use_compression: true\n")
        monkeypatch.setenv("PIXELFRAME_USE_COMPRESSION", "off")
        monkeypatch.setenv("PIXELFRAME_PNG_COMPRESSION", "1")
        monkeypatch.setenv("PIXELFRAME_PORT", "9200")

        settings = load_config(str(config_file))

        assert settings.codec.use_compression is False
        assert settings.codec.png_compression == 1
        assert settings.server.port == 9200

    def test_cloud_run_port_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PIXELFRAME_PORT", "9200")
        monkeypatch.setenv("PORT", "8080")

        assert load_config(str(tmp_path / "absent.yaml")).server.port == 8080

    def test_invalid_boolean(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PIXELFRAME_USE_COMPRESSION", "maybe")

        with pytest.raises(ConfigError, match="PIXELFRAME_USE_COMPRESSION"):
            load_config(str(tmp_path / "absent.yaml"))

    def test_invalid_integer_names_variable(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PIXELFRAME_PORT", "eighty")

        with pytest.raises(ConfigError, match="PIXELFRAME_PORT"):
            load_config(str(tmp_path / "absent.yaml"))

    def test_png_compression_range(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"codec": {"png_compression": 10}})

    def test_log_format_choices(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"logging": {"format": "xml"}})
