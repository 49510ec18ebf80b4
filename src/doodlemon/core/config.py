"""Configuration management for Doodlemon.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the DOODLEMON_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (DOODLEMON_* prefix)
2. .env file in the project root
3. Default values defined in DoodlemonConfig

Example .env file:
    DOODLEMON_GEMINI_API_KEY=...
    DOODLEMON_SERVER_PORT=3001
    DOODLEMON_GALLERY_CACHE_TTL=300

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from doodlemon.core.config import config

    print(config.image_model)
    print(config.database_path)

Directory Management
--------------------
The configuration automatically creates required directories on initialization:
- data_dir: For the SQLite creature database
- images_dir: For generated, placeholder and action images
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DoodlemonConfig(BaseSettings):
    """Main configuration for Doodlemon.

    Attributes
    ----------
    Generation Settings:
        gemini_api_key : str | None
            Server-side default API key. A key sent with a request wins.
        image_model : str
            Gemini model used for doodle -> image and action images
        text_model : str
            Gemini model used for structured creature metadata
        request_timeout_ms : int
            HTTP timeout for each Gemini call, in milliseconds

    Storage:
        data_dir : Path
            Directory holding the SQLite database
        database_name : str
            SQLite filename inside data_dir
        images_dir : Path
            Root directory for saved images
        images_url_prefix : str
            URL prefix under which saved images are served

    Gallery Cache:
        gallery_cache_ttl : int
            TTL in seconds of the cached gallery list
        cache_maxsize : int
            Maximum number of keys held by the cache

    Input Validation:
        min_doodle_length : int
            Minimum length of the base64 doodle payload
        doodle_source_length : int
            Length of the provenance snippet stored with each creature

    Server:
        server_host, server_port, cors_origin, log_level

    Examples
    --------
        >>> custom_config = DoodlemonConfig(gallery_cache_ttl=60, _env_file=None)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOODLEMON_",
        case_sensitive=False,
    )

    # Generation settings
    gemini_api_key: str | None = Field(
        default=None,
        description="Default Gemini API key (requests may supply their own)",
    )
    image_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Gemini model for image generation",
    )
    text_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model for creature metadata",
    )
    request_timeout_ms: int = Field(
        default=60_000,
        description="Per-call timeout for Gemini requests (milliseconds)",
        ge=1_000,
    )

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory for the creature database",
    )
    database_name: str = Field(
        default="creatures.db",
        description="SQLite database filename",
    )
    images_dir: Path = Field(
        default=Path("public/images"),
        description="Directory where generated images are written",
    )
    images_url_prefix: str = Field(
        default="/images",
        description="URL prefix for saved images",
    )

    # Gallery cache
    gallery_cache_ttl: int = Field(
        default=300,
        description="TTL of the cached gallery list (seconds)",
        ge=1,
    )
    cache_maxsize: int = Field(default=128, ge=1)

    # Input validation
    min_doodle_length: int = Field(
        default=100,
        description="Minimum base64 length of a doodle",
        ge=1,
    )
    doodle_source_length: int = Field(default=60, ge=0)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=3001,
        description="Server port",
        ge=1024,
        le=65535,
    )
    cors_origin: str = Field(
        default="*",
        description="Allowed CORS origin",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.images_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Full path of the SQLite database file."""
        return self.data_dir / self.database_name


# Global configuration instance, loaded from DOODLEMON_* variables and .env.
config = DoodlemonConfig()
