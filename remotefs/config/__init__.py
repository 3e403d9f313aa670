"""Configuration module for remotefs."""

from remotefs.config.settings import Settings

__all__ = ["Settings"]
