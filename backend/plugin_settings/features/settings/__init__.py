"""Settings feature module.

This module provides the schema-driven plugin settings store: schema
registration, sanitization, persistence, and the boundary gateway.
"""

from .router import router as settings_router
from .models import SchemaEntry, SettingType
from .schema import SchemaRegistry, build_schema_registry
from .sanitizer import sanitize
from .store import OptionsStore, StoreState
from .repository import (
    OptionsRepositoryInterface,
    SQLAlchemyOptionsRepository,
    InMemoryOptionsRepository,
)
from .gateway import SettingsGateway
from .lifecycle import activate, deactivate
from .dependencies import (
    get_settings_gateway,
    get_settings_authorization,
    SettingsGatewayDep,
    SettingsAuthorizationDep,
)

__all__ = [
    # Router
    "settings_router",
    # Schema
    "SchemaEntry",
    "SettingType",
    "SchemaRegistry",
    "build_schema_registry",
    "sanitize",
    # Store
    "OptionsStore",
    "StoreState",
    "OptionsRepositoryInterface",
    "SQLAlchemyOptionsRepository",
    "InMemoryOptionsRepository",
    # Gateway
    "SettingsGateway",
    # Lifecycle
    "activate",
    "deactivate",
    # Dependencies
    "get_settings_gateway",
    "get_settings_authorization",
    "SettingsGatewayDep",
    "SettingsAuthorizationDep",
]
