"""Options store: the single source of truth for plugin settings.

The store persists one blob holding only explicitly-set keys and serves a
schema-total snapshot built by merging that blob over the schema defaults.
Writes are write-through: the blob is saved before the in-memory snapshot
changes, so a failed save leaves the last known-good snapshot in place.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import structlog

from plugin_settings.core.exceptions import UnknownKeyError

from .models import OptionValue, SchemaEntry
from .repository import OptionsRepositoryInterface
from .sanitizer import sanitize
from .schema import SchemaRegistry

logger = structlog.get_logger(__name__)

DEFAULT_STORAGE_KEY = "plugin_settings"

OptionsSnapshot = Dict[str, OptionValue]


class StoreState(str, Enum):
    """Whether the persisted blob has been loaded into memory."""

    UNLOADED = "unloaded"
    LOADED = "loaded"


class OptionsStore:
    """Schema-validated options store backed by a single persisted blob.

    The first operation freezes the schema registry and loads the blob.
    Read-modify-write cycles are serialized within the process; concurrent
    writers in other processes follow last-write-wins.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        repository: OptionsRepositoryInterface,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        """Initialize the store.

        :param registry: Schema registry consulted on every read and write
        :param repository: Storage facility holding the options blob
        :param storage_key: Identifier the blob is stored under
        """
        self.registry = registry
        self.repository = repository
        self.storage_key = storage_key
        self._stored: Optional[Dict[str, Any]] = None
        self._snapshot: Optional[OptionsSnapshot] = None
        self._lock = threading.RLock()

    @property
    def state(self) -> StoreState:
        return StoreState.LOADED if self._snapshot is not None else StoreState.UNLOADED

    def _entry(self, key: str, operation: str) -> SchemaEntry:
        entry = self.registry.get(key)
        if entry is None:
            logger.warning("unknown_setting_key", key=key, operation=operation)
            raise UnknownKeyError(key, operation=operation)
        return entry

    def _defaults(self) -> OptionsSnapshot:
        return {key: entry.default for key, entry in self.registry.describe().items()}

    def _build_snapshot(self, stored: Mapping[str, Any]) -> OptionsSnapshot:
        snapshot: OptionsSnapshot = {}
        for key, entry in self.registry.describe().items():
            # Stored values are re-sanitized in case the schema changed since they were written
            snapshot[key] = sanitize(stored[key], entry) if key in stored else entry.default
        return snapshot

    def _ensure_loaded(self) -> OptionsSnapshot:
        if self._snapshot is not None:
            return self._snapshot

        self.registry.freeze()
        raw = self.repository.load(self.storage_key)

        if raw is None:
            stored: Dict[str, Any] = {}
        elif not isinstance(raw, dict):
            logger.warning(
                "stored_settings_not_a_mapping",
                storage_key=self.storage_key,
                got_type=type(raw).__name__,
            )
            stored = {}
        else:
            stored = dict(raw)

        ignored = [key for key in stored if key not in self.registry]
        if ignored:
            logger.info("stored_settings_ignored_unknown_keys", keys=ignored)

        self._stored = stored
        self._snapshot = self._build_snapshot(stored)
        logger.debug(
            "settings_loaded",
            storage_key=self.storage_key,
            explicit_keys=len(stored),
        )
        return self._snapshot

    def _write(self, changes: Mapping[str, OptionValue]) -> None:
        snapshot = self._ensure_loaded()
        stored = {**(self._stored or {}), **changes}
        # Raises PersistenceError before the cache is touched
        self.repository.save(self.storage_key, stored)
        self._stored = stored
        self._snapshot = {**snapshot, **changes}

    def get_all(self) -> OptionsSnapshot:
        """Return the current value of every schema key.

        :returns: Persisted values merged over schema defaults
        :raises PersistenceError: If the blob cannot be loaded
        """
        with self._lock:
            return dict(self._ensure_loaded())

    def get(self, key: str) -> OptionValue:
        """Return the current value of one key.

        :raises UnknownKeyError: If ``key`` is not in the schema
        :raises PersistenceError: If the blob cannot be loaded
        """
        with self._lock:
            snapshot = self._ensure_loaded()
            self._entry(key, "get")
            return snapshot[key]

    def set(self, key: str, raw_value: Any) -> OptionValue:
        """Sanitize and persist one value.

        :param key: Schema key
        :param raw_value: Untrusted input value
        :returns: The sanitized value that was stored
        :raises UnknownKeyError: If ``key`` is not in the schema
        :raises PersistenceError: If the blob cannot be loaded or saved
        """
        with self._lock:
            self._ensure_loaded()
            entry = self._entry(key, "set")
            value = sanitize(raw_value, entry)
            self._write({key: value})

        logger.info("setting_updated", key=key)
        return value

    def set_many(self, raw_mapping: Mapping[str, Any]) -> OptionsSnapshot:
        """Sanitize and persist several values with a single write.

        Keys the schema does not know are ignored.

        :param raw_mapping: Mapping of key to untrusted input value
        :returns: The full snapshot after the update
        :raises PersistenceError: If the blob cannot be loaded or saved
        """
        with self._lock:
            self._ensure_loaded()

            changes: Dict[str, OptionValue] = {}
            ignored = []
            for key, raw_value in raw_mapping.items():
                entry = self.registry.get(key)
                if entry is None:
                    ignored.append(key)
                    continue
                changes[key] = sanitize(raw_value, entry)

            if changes:
                self._write(changes)
            snapshot = dict(self._snapshot)

        if ignored:
            logger.info("settings_update_ignored_unknown_keys", keys=ignored)
        if changes:
            logger.info("settings_updated", keys=list(changes))
        return snapshot

    def reset(self) -> OptionsSnapshot:
        """Delete the persisted blob so every key resolves to its default.

        :returns: The defaults snapshot
        :raises PersistenceError: If the blob cannot be deleted
        """
        with self._lock:
            self.registry.freeze()
            self.repository.delete(self.storage_key)
            self._stored = {}
            self._snapshot = self._defaults()
            snapshot = dict(self._snapshot)

        logger.info("settings_reset", storage_key=self.storage_key)
        return snapshot
