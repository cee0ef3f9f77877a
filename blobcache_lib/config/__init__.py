"""Configuration loading for the artifact cache."""

from .config import CacheConfig, default_config_yaml, load_config

__all__ = ["CacheConfig", "default_config_yaml", "load_config"]
