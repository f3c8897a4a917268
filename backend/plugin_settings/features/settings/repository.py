"""Repository pattern implementation for persisted options.

The repository is the host's storage facility: it reads and writes whole
JSON values under a storage identifier and knows nothing about the schema.
"""

import copy
import json
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from plugin_settings.core.database import DatabaseManager
from plugin_settings.core.exceptions import PersistenceError

from .orm_models import OptionORM

logger = structlog.get_logger(__name__)


class OptionsRepositoryInterface(ABC):
    """Interface for option storage.

    Defines contract for data access operations.
    Enables mocking and swapping the storage backend.
    """

    @abstractmethod
    def load(self, name: str) -> Optional[Any]:
        """Load the value stored under ``name``.

        :param name: Storage identifier
        :returns: Decoded value, or None if nothing is stored
        :raises PersistenceError: If the storage facility fails
        """
        pass

    @abstractmethod
    def save(self, name: str, value: Any) -> None:
        """Store ``value`` under ``name``, replacing any previous value.

        :param name: Storage identifier
        :param value: JSON-serialisable value
        :raises PersistenceError: If the storage facility fails
        """
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove the value stored under ``name``; missing values are ignored.

        :param name: Storage identifier
        :raises PersistenceError: If the storage facility fails
        """
        pass


class SQLAlchemyOptionsRepository(OptionsRepositoryInterface):
    """SQLAlchemy implementation of option storage."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def load(self, name: str) -> Optional[Any]:
        try:
            with self.db_manager.get_session() as session:
                option = session.get(OptionORM, name)
                return copy.deepcopy(option.value) if option else None
        except (SQLAlchemyError, ValueError) as e:
            # ValueError covers a stored value that is not valid JSON
            logger.error(
                "option_load_failed",
                name=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceError(
                f"Failed to load option {name!r}",
                operation="load",
                context={"name": name},
                original_error=e,
            ) from e

    def save(self, name: str, value: Any) -> None:
        try:
            with self.db_manager.get_session() as session:
                option = session.get(OptionORM, name)
                if option:
                    option.value = copy.deepcopy(value)
                else:
                    session.add(OptionORM(name=name, value=copy.deepcopy(value)))
                session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.error(
                "option_save_failed",
                name=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceError(
                f"Failed to save option {name!r}",
                operation="save",
                context={"name": name},
                original_error=e,
            ) from e

        logger.debug("option_saved", name=name)

    def delete(self, name: str) -> None:
        try:
            with self.db_manager.get_session() as session:
                option = session.get(OptionORM, name)
                if option:
                    session.delete(option)
                    session.commit()
        except SQLAlchemyError as e:
            logger.error("option_delete_failed", name=name, error=str(e))
            raise PersistenceError(
                f"Failed to delete option {name!r}",
                operation="delete",
                context={"name": name},
                original_error=e,
            ) from e

        logger.debug("option_deleted", name=name)


class InMemoryOptionsRepository(OptionsRepositoryInterface):
    """Process-local option storage.

    Values are JSON round-tripped on write so serialisation failures surface
    exactly as they would with a real backend.
    """

    def __init__(self) -> None:
        self._values: Dict[str, str] = {}
        self._lock = threading.Lock()

    def load(self, name: str) -> Optional[Any]:
        with self._lock:
            encoded = self._values.get(name)
        return json.loads(encoded) if encoded is not None else None

    def save(self, name: str, value: Any) -> None:
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise PersistenceError(
                f"Failed to serialise option {name!r}",
                operation="save",
                context={"name": name},
                original_error=e,
            ) from e
        with self._lock:
            self._values[name] = encoded

    def delete(self, name: str) -> None:
        with self._lock:
            self._values.pop(name, None)
