"""Configuration management for scantext.

Loads and validates YAML configuration with sensible defaults for
layout reconstruction, OCR, the record database and upload storage.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class LayoutConfig(BaseModel):
    """Tuning knobs for rebuilding text layout from OCR output.

    All values are heuristic approximations, not derived constants.
    """

    band_height: int = Field(default=10, gt=0)
    pixels_per_char: int = Field(default=20, gt=0)
    char_advance_px: int = Field(default=7, ge=0)
    column_widths: list[int] = Field(default_factory=lambda: [10, 10, 20, 10, 10])

    @field_validator("column_widths")
    @classmethod
    def _check_widths(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("column_widths must not be empty")
        if any(width <= 0 for width in value):
            raise ValueError("column_widths must be positive")
        return value


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3


class DatabaseConfig(BaseModel):
    """Configuration for the OCR record database."""

    url: str = "sqlite:///scantext.db"
    echo: bool = False


class StorageConfig(BaseModel):
    """Configuration for uploaded image storage."""

    upload_dir: str = "uploads"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
