"""Configuration module for kvpool."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
