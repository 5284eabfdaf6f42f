"""
Configuration management for dsci-ml.

Settings come from environment variables, with an optional .env file at the
project root. get_settings() is the single source of truth.
"""

from dsci_ml.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
