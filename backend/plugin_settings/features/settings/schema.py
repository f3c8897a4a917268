"""Schema registry for recognized option keys.

The registry is filled during a bootstrap phase (base options first, then
contributors in order) and frozen when the options store first loads.
Registrations after that point are rejected.
"""

from __future__ import annotations

import dataclasses
import importlib
import threading
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence

import structlog

from plugin_settings.core.exceptions import SchemaError

from .defaults import BASE_SCHEMA
from .models import SanitizeCallback, SchemaEntry, SettingType
from .sanitizer import BUILTIN_SANITIZERS, is_member

logger = structlog.get_logger(__name__)

SchemaContributor = Callable[["SchemaRegistry"], None]

# Keys that collide with fixed paths of the settings API
RESERVED_KEYS = frozenset({"schema"})


def validate_entry(entry: SchemaEntry) -> None:
    """Check that an entry's default satisfies its own type and enum constraint.

    :raises SchemaError: If the declaration is inconsistent
    """
    if not entry.key or not isinstance(entry.key, str):
        raise SchemaError("Setting key must be a non-empty string", key=entry.key)
    if entry.key in RESERVED_KEYS:
        raise SchemaError(f"Setting key {entry.key!r} is reserved", key=entry.key)

    if entry.type is SettingType.ENUM and not entry.enum_values:
        raise SchemaError("Enum settings require enum_values", key=entry.key)

    if entry.enum_values is not None and entry.type not in (
        SettingType.STRING,
        SettingType.ENUM,
    ):
        raise SchemaError(
            f"enum_values are not allowed for {entry.type.value} settings",
            key=entry.key,
        )

    if entry.enum_values is not None:
        invalid = [
            value
            for value in entry.enum_values
            if not isinstance(value, (str, bool, int))
        ]
        if invalid:
            raise SchemaError(
                "Enum values must be strings, booleans or integers",
                key=entry.key,
                context={"invalid_values": [repr(value) for value in invalid]},
            )

    default = entry.default
    if entry.type is SettingType.STRING and not isinstance(default, str):
        raise SchemaError("Default of a string setting must be a string", key=entry.key)
    if entry.type is SettingType.BOOLEAN and not isinstance(default, bool):
        raise SchemaError("Default of a boolean setting must be a boolean", key=entry.key)
    if entry.type is SettingType.INTEGER and (
        isinstance(default, bool) or not isinstance(default, int)
    ):
        raise SchemaError("Default of an integer setting must be an integer", key=entry.key)

    if entry.enum_values is not None and not is_member(default, entry.enum_values):
        raise SchemaError(
            "Default is not one of the allowed enum values",
            key=entry.key,
            context={"enum_values": list(entry.enum_values)},
        )


class SchemaRegistry:
    """Ordered registry of schema entries with an explicit freeze point."""

    def __init__(self) -> None:
        self._entries: Dict[str, SchemaEntry] = {}
        self._sanitizers: Dict[str, SanitizeCallback] = dict(BUILTIN_SANITIZERS)
        self._frozen = False
        self._lock = threading.Lock()

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the registry immutable for the rest of the process lifetime."""
        with self._lock:
            if not self._frozen:
                self._frozen = True
                logger.info("settings_schema_frozen", keys=list(self._entries))

    def _ensure_mutable(self, what: str) -> None:
        if self._frozen:
            raise SchemaError(f"Cannot register {what} after the schema is in use")

    def register_sanitizer(self, name: str, callback: SanitizeCallback) -> None:
        """Make a named sanitization function available to schema entries.

        :raises SchemaError: If the registry is frozen
        """
        with self._lock:
            self._ensure_mutable(f"sanitizer {name!r}")
            self._sanitizers[name] = callback
            logger.debug("settings_sanitizer_registered", sanitizer=name)

    def _resolve_sanitizer(self, entry: SchemaEntry) -> SchemaEntry:
        if entry.sanitizer is None:
            return entry
        callback = self._sanitizers.get(entry.sanitizer)
        if callback is None:
            raise SchemaError(
                f"Unknown sanitizer {entry.sanitizer!r}",
                key=entry.key,
                context={"known_sanitizers": sorted(self._sanitizers)},
            )
        return dataclasses.replace(entry, sanitize_callback=callback)

    def register(self, entries: Iterable[SchemaEntry]) -> None:
        """Add or override entries.

        The whole batch is validated before anything is applied, so a rejected
        call leaves the registry unchanged.

        :param entries: Entries to register, in declaration order
        :raises SchemaError: On an invalid default, a conflicting type for an
            existing key, an unknown sanitizer, or registration after freeze
        """
        with self._lock:
            self._ensure_mutable("settings")

            staged: Dict[str, SchemaEntry] = {}
            for entry in entries:
                validate_entry(entry)
                previous = staged.get(entry.key) or self._entries.get(entry.key)
                if previous is not None and previous.type is not entry.type:
                    raise SchemaError(
                        f"Setting already registered as {previous.type.value}",
                        key=entry.key,
                        context={"requested_type": entry.type.value},
                    )
                staged[entry.key] = self._resolve_sanitizer(entry)

            for key, entry in staged.items():
                overridden = key in self._entries
                # dict assignment keeps the original declaration position on override
                self._entries[key] = entry
                logger.debug(
                    "setting_registered",
                    key=key,
                    type=entry.type.value,
                    overridden=overridden,
                )

    def register_mapping(self, properties: Mapping[str, Mapping]) -> None:
        """Register entries from JSON-schema style property declarations."""
        entries = []
        for key, data in properties.items():
            try:
                entries.append(SchemaEntry.from_mapping(key, data))
            except (KeyError, ValueError, TypeError) as e:
                raise SchemaError(f"Malformed declaration: {e}", key=key) from e
        self.register(entries)

    def describe(self) -> Mapping[str, SchemaEntry]:
        """Return a read-only view of the schema in declaration order."""
        return MappingProxyType(dict(self._entries))

    def get(self, key: str) -> Optional[SchemaEntry]:
        return self._entries.get(key)

    def keys(self) -> Sequence[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def load_contributor(path: str) -> SchemaContributor:
    """Import a contributor callable from ``package.module:attribute`` or
    ``package.module.attribute``.

    :raises SchemaError: If the path cannot be imported or is not callable
    """
    module_name, sep, attribute = path.partition(":")
    if not sep:
        module_name, _, attribute = path.rpartition(".")
    try:
        module = importlib.import_module(module_name)
        contributor = getattr(module, attribute)
    except (ImportError, AttributeError, ValueError) as e:
        raise SchemaError(f"Cannot load schema contributor {path!r}: {e}") from e
    if not callable(contributor):
        raise SchemaError(f"Schema contributor {path!r} is not callable")
    return contributor


def build_schema_registry(
    contributors: Iterable[SchemaContributor | str] = (),
    base_entries: Optional[Iterable[SchemaEntry]] = None,
) -> SchemaRegistry:
    """Bootstrap a registry: base options first, then each contributor in order.

    :param contributors: Callables (or their import paths) taking the registry
    :param base_entries: Base options; defaults to the plugin's built-in set
    :returns: Populated, still mutable registry
    """
    registry = SchemaRegistry()
    registry.register(BASE_SCHEMA if base_entries is None else base_entries)

    for contributor in contributors:
        if isinstance(contributor, str):
            contributor = load_contributor(contributor)
        contributor(registry)
        logger.info(
            "settings_schema_contributor_applied",
            contributor=getattr(contributor, "__name__", repr(contributor)),
        )

    return registry
