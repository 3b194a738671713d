"""
kvpool Configuration Settings

This module contains all configuration constants for the kvpool server.
Values can be overridden with environment variables or CLI flags.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings (transport only)
    HOST: str = os.environ.get("KVPOOL_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("KVPOOL_PORT", "10808"))

    # Memory governor settings
    MEMORY_LIMIT: int = int(os.environ.get("KVPOOL_MEMORY_LIMIT", "128"))  # MB
    TICK_INTERVAL: float = float(os.environ.get("KVPOOL_TICK_INTERVAL", "1.0"))  # Seconds between governor ticks

    # Key settings
    MAX_KEY_LENGTH: int = 64

    # Connection settings
    READ_BUFFER_SIZE: int = 64 * 1024

    # Logging settings: 0 = warnings only, 1 = info, 2+ = debug
    VERBOSITY: int = int(os.environ.get("KVPOOL_VERBOSITY", "1"))


# Global settings instance
settings = Settings()
