"""Core infrastructure module.

This module exports core utilities used across features.
Never imports from features - only from external libraries.
"""

from .config import ServiceConfig, get_config, get_global_config
from .database import Base, DatabaseManager
from .exceptions import (
    SettingsError,
    SchemaError,
    UnknownKeyError,
    PersistenceError,
    GatewayError,
    GatewayErrorReason,
)
from .logging import setup_logging

__all__ = [
    # Config
    "ServiceConfig",
    "get_config",
    "get_global_config",
    # Database
    "Base",
    "DatabaseManager",
    # Exceptions
    "SettingsError",
    "SchemaError",
    "UnknownKeyError",
    "PersistenceError",
    "GatewayError",
    "GatewayErrorReason",
    # Logging
    "setup_logging",
]
