"""Doodlemon - turn doodles into creatures and keep a cached gallery of them."""

__version__ = "0.1.0"

from doodlemon.core.config import DoodlemonConfig, config

__all__ = [
    "DoodlemonConfig",
    "config",
]
