"""
Frame Compositor Configuration
==============================

This module handles configuration loading for the frame compositor.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    FRAMER_CATALOGUE_PATH  -> catalogue.path
    FRAMER_ENFORCE_CORS    -> loader.enforce_cors
    FRAMER_ORIGIN          -> loader.origin
    FRAMER_HTTP_TIMEOUT    -> loader.http_timeout_seconds
    FRAMER_EXPORT_DIR      -> export.directory
    FRAMER_EXPORT_FORMAT   -> export.format
    FRAMER_LOG_LEVEL       -> logging.level

Relative Paths:
    A relative catalogue.path in the YAML file is resolved against the
    directory holding that file. FRAMER_CATALOGUE_PATH is used as given.

Example:
    from frame_compositor.config import load_config, setup_logging

    settings = load_config("config.yaml")
    setup_logging(settings)
    print(settings.loader.enforce_cors)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class LayoutConfig(BaseModel):
    """Canvas sizing and frame placement constants."""

    circular_max_side: int = Field(
        default=600,
        ge=1,
        description="Largest side of the square canvas used by circular frames",
    )
    circular_padding: int = Field(
        default=20,
        ge=0,
        description="Gap between the photo circle and the canvas edge",
    )
    max_width: int = Field(default=800, ge=1, description="Canvas width cap")
    max_height: int = Field(default=600, ge=1, description="Canvas height cap")
    anchored_width_fraction: float = Field(
        default=0.7,
        gt=0,
        le=1.0,
        description="Anchored frame width as a fraction of canvas width",
    )
    anchored_padding: int = Field(
        default=10,
        ge=0,
        description="Padding between an anchored frame and the canvas edges",
    )


class LoaderConfig(BaseModel):
    """Raster loader configuration."""

    http_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for remote asset requests",
    )
    enforce_cors: bool = Field(
        default=True,
        description="Reject remote assets that do not allow cross-origin use",
    )
    origin: Optional[str] = Field(
        default=None,
        description="Origin header for remote requests (None = opaque origin 'null')",
    )
    user_agent: str = Field(
        default="frame-compositor/0.1",
        description="User-Agent header for remote requests",
    )
    cache_size: int = Field(
        default=16,
        ge=0,
        description="Decoded images kept in memory (0 = no caching)",
    )


class CatalogueEntryConfig(BaseModel):
    """Inline catalogue entry."""

    id: Optional[str] = Field(default=None, description="Variant id")
    display_name: Optional[str] = Field(default=None, description="Label")
    asset_ref: str = Field(..., description="Data URI, URL or path of the asset")
    layout: Optional[str] = Field(
        default=None,
        description="Explicit layout class, overriding the id table",
    )


class CatalogueConfig(BaseModel):
    """Frame catalogue configuration."""

    path: Optional[str] = Field(
        default=None,
        description="YAML file listing frame assets",
    )
    frames: List[CatalogueEntryConfig] = Field(
        default_factory=list,
        description="Inline frame entries (used when no path is set)",
    )
    probe: bool = Field(
        default=False,
        description="Load every asset at startup and skip unreachable ones",
    )


class ExportConfig(BaseModel):
    """Export sink configuration."""

    format: str = Field(default="png", description="Output format: png or jpeg")
    filename_prefix: str = Field(default="framed", description="Download name prefix")
    directory: str = Field(default=".", description="Directory for saved exports")
    jpeg_quality: int = Field(default=92, ge=1, le=100, description="JPEG quality")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the frame compositor.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    catalogue: CatalogueConfig = Field(default_factory=CatalogueConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
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
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
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
        _resolve_relative_paths(config_data, Path(config_path).parent)
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _resolve_relative_paths(config_data: dict, base_dir: Path) -> None:
    """Anchor file-relative paths to the config file's directory."""
    catalogue = config_data.get("catalogue")
    if isinstance(catalogue, dict) and catalogue.get("path"):
        path = Path(catalogue["path"])
        if not path.is_absolute():
            catalogue["path"] = str(base_dir / path)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Catalogue
    if env_catalogue := os.environ.get("FRAMER_CATALOGUE_PATH"):
        config_data.setdefault("catalogue", {})["path"] = env_catalogue

    # Loader
    if env_cors := os.environ.get("FRAMER_ENFORCE_CORS"):
        config_data.setdefault("loader", {})["enforce_cors"] = _parse_bool(env_cors)
    if env_origin := os.environ.get("FRAMER_ORIGIN"):
        config_data.setdefault("loader", {})["origin"] = env_origin
    if env_timeout := os.environ.get("FRAMER_HTTP_TIMEOUT"):
        config_data.setdefault("loader", {})["http_timeout_seconds"] = float(env_timeout)

    # Export
    if env_dir := os.environ.get("FRAMER_EXPORT_DIR"):
        config_data.setdefault("export", {})["directory"] = env_dir
    if env_format := os.environ.get("FRAMER_EXPORT_FORMAT"):
        config_data.setdefault("export", {})["format"] = env_format

    # Logging
    if env_log := os.environ.get("FRAMER_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


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

