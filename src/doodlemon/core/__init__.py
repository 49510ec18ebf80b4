"""Core functionality for creature generation.

- **config.py**: Environment-based configuration using Pydantic Settings
- **errors.py**: The error kinds surfaced to the API layer
- **models.py**: ``Creature`` and ``Power`` records
- **image_sink.py**: Writes generated images to disk and returns URLs
- **creature_store.py**: SQLite-backed creature repository
- **gallery_cache.py**: TTL cache and the incremental gallery sync
- **generator.py**: Gemini client wrapper for the three generation calls
- **simulator.py**: Dependency-free fallback creature generator
- **pipeline.py**: Doodle -> creature orchestration with fallback
- **action_images.py**: Lazy, durable per-power action images
- **service.py**: The operations the HTTP layer consumes
"""

from doodlemon.core.config import DoodlemonConfig, config
from doodlemon.core.errors import (
    DoodlemonError,
    GenerationError,
    NotFoundError,
    ValidationError,
)
from doodlemon.core.models import Creature, Power

__all__ = [
    "Creature",
    "DoodlemonConfig",
    "DoodlemonError",
    "GenerationError",
    "NotFoundError",
    "Power",
    "ValidationError",
    "config",
]
