"""Application configuration helpers."""

from __future__ import annotations

from .env import env_choice, env_float, optional_env_var
from .errors import ConfigurationError
from .logging import configure_logging
from .scan import ScanConfig, get_scan_config
from .storage import StorageConfig, get_storage_config

__all__ = [
    "ConfigurationError",
    "ScanConfig",
    "StorageConfig",
    "configure_logging",
    "env_choice",
    "env_float",
    "get_scan_config",
    "get_storage_config",
    "optional_env_var",
]
