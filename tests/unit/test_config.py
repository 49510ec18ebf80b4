"""Tests for doodlemon.core.config — configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides via the DOODLEMON_ prefix.
- Automatic directory creation on initialisation.
- Pydantic validation constraints (port range, log level, TTL).
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from doodlemon.core.config import DoodlemonConfig


def _config(temp_dir: Path, **overrides) -> DoodlemonConfig:
    return DoodlemonConfig(
        _env_file=None,
        data_dir=temp_dir / "data",
        images_dir=temp_dir / "images",
        **overrides,
    )


class TestConfigDefaults:
    """Verify that DoodlemonConfig provides sensible defaults."""

    def test_generation_defaults(self, monkeypatch, temp_dir):
        monkeypatch.delenv("DOODLEMON_IMAGE_MODEL", raising=False)
        monkeypatch.delenv("DOODLEMON_TEXT_MODEL", raising=False)
        cfg = _config(temp_dir)

        assert cfg.image_model == "gemini-2.5-flash-image"
        assert cfg.text_model == "gemini-2.5-flash"
        assert cfg.request_timeout_ms == 60_000

    def test_gallery_cache_ttl_is_five_minutes(self, test_config: DoodlemonConfig):
        assert test_config.gallery_cache_ttl == 300

    def test_validation_defaults(self, test_config: DoodlemonConfig):
        assert test_config.min_doodle_length == 100
        assert test_config.doodle_source_length == 60

    def test_default_server_port(self, monkeypatch, temp_dir):
        """Default server port should be 3001."""
        monkeypatch.delenv("DOODLEMON_SERVER_PORT", raising=False)
        assert _config(temp_dir).server_port == 3001

    def test_default_images_prefix(self, test_config: DoodlemonConfig):
        assert test_config.images_url_prefix == "/images"


class TestConfigDirectoryCreation:
    """Verify that DoodlemonConfig creates required directories."""

    def test_data_dir_created(self, test_config: DoodlemonConfig):
        assert test_config.data_dir.is_dir()

    def test_images_dir_created(self, test_config: DoodlemonConfig):
        assert test_config.images_dir.is_dir()

    def test_nested_dirs_created(self, temp_dir):
        cfg = DoodlemonConfig(
            _env_file=None,
            data_dir=temp_dir / "a" / "b",
            images_dir=temp_dir / "c" / "d",
        )
        assert cfg.data_dir.is_dir()
        assert cfg.images_dir.is_dir()


class TestConfigEnvironment:
    """Verify DOODLEMON_* environment overrides."""

    def test_env_overrides_port(self, monkeypatch, temp_dir):
        monkeypatch.setenv("DOODLEMON_SERVER_PORT", "8080")
        assert _config(temp_dir).server_port == 8080

    def test_env_sets_api_key(self, monkeypatch, temp_dir):
        monkeypatch.setenv("DOODLEMON_GEMINI_API_KEY", "env-key")
        assert _config(temp_dir).gemini_api_key == "env-key"

    def test_env_is_case_insensitive(self, monkeypatch, temp_dir):
        monkeypatch.setenv("doodlemon_gallery_cache_ttl", "42")
        assert _config(temp_dir).gallery_cache_ttl == 42


class TestConfigPaths:
    def test_database_path(self, test_config: DoodlemonConfig):
        assert test_config.database_path == test_config.data_dir / "creatures.db"

    def test_custom_database_name(self, temp_dir):
        cfg = _config(temp_dir, database_name="other.db")
        assert cfg.database_path.name == "other.db"


class TestConfigValidation:
    """Pydantic constraints reject out-of-range values."""

    @pytest.mark.parametrize("port", [80, 70000])
    def test_port_out_of_range(self, temp_dir, port):
        with pytest.raises(ValidationError):
            _config(temp_dir, server_port=port)

    def test_zero_ttl_rejected(self, temp_dir):
        with pytest.raises(ValidationError):
            _config(temp_dir, gallery_cache_ttl=0)

    def test_unknown_log_level_rejected(self, temp_dir):
        with pytest.raises(ValidationError):
            _config(temp_dir, log_level="VERBOSE")
