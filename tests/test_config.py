"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from scantext.utils.config import (
    AppConfig,
    DatabaseConfig,
    LayoutConfig,
    OCRConfig,
    StorageConfig,
    load_config,
)


class TestLayoutConfig:
    """Tests for LayoutConfig defaults and validation."""

    def test_defaults(self) -> None:
        cfg = LayoutConfig()
        assert cfg.band_height == 10
        assert cfg.pixels_per_char == 20
        assert cfg.char_advance_px == 7
        assert cfg.column_widths == [10, 10, 20, 10, 10]

    def test_override(self) -> None:
        cfg = LayoutConfig(band_height=15, column_widths=[8, 8])
        assert cfg.band_height == 15
        assert cfg.column_widths == [8, 8]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"band_height": 0},
            {"pixels_per_char": -5},
            {"char_advance_px": -1},
            {"column_widths": []},
            {"column_widths": [10, 0]},
        ],
    )
    def test_invalid_values_rejected(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            LayoutConfig(**overrides)


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.default_lang == "eng"
        assert cfg.psm == 3
        assert cfg.tesseract_cmd is None

    def test_custom_lang(self) -> None:
        cfg = OCRConfig(default_lang="fra", psm=6)
        assert cfg.default_lang == "fra"
        assert cfg.psm == 6


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.layout, LayoutConfig)
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.database, DatabaseConfig)
        assert isinstance(cfg.storage, StorageConfig)
        assert cfg.database.url == "sqlite:///scantext.db"
        assert cfg.storage.upload_dir == "uploads"
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(layout=LayoutConfig(pixels_per_char=10), log_level="DEBUG")
        assert cfg.layout.pixels_per_char == 10
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_project_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "eng"
        assert cfg.layout == LayoutConfig()

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "layout": {"band_height": 12, "column_widths": [6, 6, 12]},
            "database": {"url": "sqlite://"},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.layout.band_height == 12
        assert cfg.layout.column_widths == [6, 6, 12]
        assert cfg.layout.pixels_per_char == 20
        assert cfg.database.url == "sqlite://"
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert load_config(config_file) == AppConfig()
