"""
PixelFrame Configuration
========================

This module handles configuration loading for the CLI and the HTTP service.
The codec itself takes every option as an explicit argument and never
reads these settings.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    PIXELFRAME_CONFIG          -> path of the config file
    PIXELFRAME_USE_COMPRESSION -> codec.use_compression
    PIXELFRAME_PNG_COMPRESSION -> codec.png_compression
    PIXELFRAME_HOST            -> server.host
    PIXELFRAME_PORT            -> server.port
    PIXELFRAME_MAX_BODY_BYTES  -> server.max_body_bytes
    PIXELFRAME_LOG_LEVEL       -> logging.level
    PIXELFRAME_LOG_FORMAT      -> logging.format
    PORT                       -> server.port (Cloud Run)

Example:
    from pixelframe.config import settings

    print(settings.codec.use_compression)
    print(settings.server.port)
"""

import os
import logging
from pathlib import Path
from typing import Any, Callable, Literal, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when an environment override cannot be parsed."""


# =============================================================================
# Configuration Models
# =============================================================================

class AppConfig(BaseModel):
    """Application identification."""

    name: str = Field(default="pixelframe", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class CodecConfig(BaseModel):
    """Defaults applied by the CLI and service when a request does not say."""

    use_compression: bool = Field(
        default=True,
        description="Gzip payloads before rasterizing",
    )
    png_compression: int = Field(
        default=6,
        ge=0,
        le=9,
        description="PNG zlib level (lossless at every level)",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")
    max_body_bytes: int = Field(
        default=64 * 1024 * 1024,
        ge=1,
        description="Largest accepted request body in bytes",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: Literal["json", "text"] = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for PixelFrame.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    app: AppConfig = Field(default_factory=AppConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, uses PIXELFRAME_CONFIG
            or searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        config_path = os.environ.get("PIXELFRAME_CONFIG")

    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path.home() / ".config" / "pixelframe" / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def _env_value(name: str, convert: Callable[[str], Any]) -> Any:
    """Read and convert an environment variable, naming it on failure."""
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return convert(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r} ({e})") from e


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Codec settings
    if (env_compress := _env_value("PIXELFRAME_USE_COMPRESSION", _parse_bool)) is not None:
        config_data.setdefault("codec", {})["use_compression"] = env_compress
    if (env_png := _env_value("PIXELFRAME_PNG_COMPRESSION", int)) is not None:
        config_data.setdefault("codec", {})["png_compression"] = env_png

    # Server settings (Cloud Run uses PORT env var)
    if env_host := os.environ.get("PIXELFRAME_HOST"):
        config_data.setdefault("server", {})["host"] = env_host
    if (env_port := _env_value("PORT", int)) is not None:
        config_data.setdefault("server", {})["port"] = env_port
    elif (env_port := _env_value("PIXELFRAME_PORT", int)) is not None:
        config_data.setdefault("server", {})["port"] = env_port
    if (env_body := _env_value("PIXELFRAME_MAX_BODY_BYTES", int)) is not None:
        config_data.setdefault("server", {})["max_body_bytes"] = env_body

    # Logging settings
    if env_log := os.environ.get("PIXELFRAME_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_fmt := os.environ.get("PIXELFRAME_LOG_FORMAT"):
        config_data.setdefault("logging", {})["format"] = env_fmt


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
