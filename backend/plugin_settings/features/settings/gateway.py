"""Settings gateway: the boundary contract over the options store.

The gateway validates request shape and the caller's authorization flag,
then delegates to the store. Verifying who the caller is belongs to the
host; the gateway only consumes the resulting boolean.
"""

from collections.abc import Mapping
from typing import Any, Dict, List

import structlog

from plugin_settings.core.exceptions import GatewayError, GatewayErrorReason

from .models import OptionValue
from .store import OptionsSnapshot, OptionsStore

logger = structlog.get_logger(__name__)


class SettingsGateway:
    """Read/update operations exposed to a remote interface."""

    def __init__(self, store: OptionsStore):
        """Initialize gateway with the options store.

        :param store: Store instance owned by the host process
        """
        self.store = store

    def _require_authorized(self, authorized: bool, operation: str) -> None:
        if authorized is not True:
            logger.warning("settings_permission_denied", operation=operation)
            raise GatewayError(
                GatewayErrorReason.PERMISSION_DENIED,
                "Not allowed to modify settings",
                operation=operation,
            )

    def read_settings(self) -> OptionsSnapshot:
        """Return the full settings snapshot."""
        return self.store.get_all()

    def read_setting(self, key: str) -> OptionValue:
        """Return one setting.

        :raises UnknownKeyError: If ``key`` is not in the schema
        """
        return self.store.get(key)

    def write_settings(self, raw_mapping: Any, authorized: bool) -> OptionsSnapshot:
        """Apply a bulk update submitted by a client.

        :param raw_mapping: Request body; must be a mapping of key to raw value
        :param authorized: Pre-verified capability flag supplied by the host
        :returns: Snapshot after the update
        :raises GatewayError: PERMISSION_DENIED or INVALID_REQUEST; the store
            is not touched in either case
        """
        self._require_authorized(authorized, "write_settings")

        if not isinstance(raw_mapping, Mapping):
            logger.warning(
                "settings_invalid_request",
                operation="write_settings",
                got_type=type(raw_mapping).__name__,
            )
            raise GatewayError(
                GatewayErrorReason.INVALID_REQUEST,
                "Settings payload must be an object",
                operation="write_settings",
            )

        return self.store.set_many(raw_mapping)

    def write_setting(self, key: str, raw_value: Any, authorized: bool) -> OptionValue:
        """Update one setting.

        :raises GatewayError: PERMISSION_DENIED
        :raises UnknownKeyError: If ``key`` is not in the schema
        """
        self._require_authorized(authorized, "write_setting")
        return self.store.set(key, raw_value)

    def reset_settings(self, authorized: bool) -> OptionsSnapshot:
        """Clear every stored setting.

        :raises GatewayError: PERMISSION_DENIED
        """
        self._require_authorized(authorized, "reset_settings")
        return self.store.reset()

    def describe_schema(self) -> List[Dict[str, Any]]:
        """Describe every option with its current value, in declaration order.

        :returns: Items shaped ``{key, type, description, default,
            enumValues?, currentValue}``
        """
        current = self.store.get_all()
        return [
            {**entry.to_dict(), "currentValue": current[key]}
            for key, entry in self.store.registry.describe().items()
        ]
