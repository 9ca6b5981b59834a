"""Configuration module for Talentwatch."""

from talentwatch.config.settings import Settings, StorageBackend, get_settings

__all__ = ["Settings", "StorageBackend", "get_settings"]
