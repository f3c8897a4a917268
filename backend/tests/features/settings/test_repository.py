"""
Tests for option storage implementations.
"""

from contextlib import contextmanager

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from plugin_settings.core.database import DatabaseManager
from plugin_settings.core.exceptions import PersistenceError
from plugin_settings.features.settings.repository import (
    InMemoryOptionsRepository,
    SQLAlchemyOptionsRepository,
)
from plugin_settings.features.settings.schema import build_schema_registry
from plugin_settings.features.settings.store import OptionsStore


@pytest.fixture
def db_manager():
    manager = DatabaseManager("sqlite://")
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def repository(db_manager):
    return SQLAlchemyOptionsRepository(db_manager)


@contextmanager
def _broken_session():
    raise OperationalError("SELECT 1", {}, Exception("database is locked"))
    yield


class TestSQLAlchemyOptionsRepository:
    """Test cases for the SQLAlchemy storage facility."""

    def test_load_missing_returns_none(self, repository):
        assert repository.load("plugin_settings") is None

    def test_save_and_load(self, repository):
        repository.save("plugin_settings", {"setting1": "A", "setting3": True})

        assert repository.load("plugin_settings") == {
            "setting1": "A",
            "setting3": True,
        }

    def test_save_replaces_previous_value(self, repository):
        repository.save("plugin_settings", {"setting1": "A"})
        repository.save("plugin_settings", {"setting2": "B"})

        assert repository.load("plugin_settings") == {"setting2": "B"}

    def test_scalar_values(self, repository):
        repository.save("plugin_settings_version", "1.2.0")

        assert repository.load("plugin_settings_version") == "1.2.0"

    def test_loaded_value_is_detached(self, repository):
        repository.save("plugin_settings", {"setting1": "A"})

        loaded = repository.load("plugin_settings")
        loaded["setting1"] = "changed"

        assert repository.load("plugin_settings") == {"setting1": "A"}

    def test_delete(self, repository):
        repository.save("plugin_settings", {"setting1": "A"})

        repository.delete("plugin_settings")

        assert repository.load("plugin_settings") is None

    def test_delete_missing_is_ignored(self, repository):
        repository.delete("plugin_settings")

    def test_unserialisable_value_raises(self, repository):
        with pytest.raises(PersistenceError) as exc_info:
            repository.save("plugin_settings", {"setting1": object()})

        assert exc_info.value.operation == "save"
        assert repository.load("plugin_settings") is None

    @pytest.mark.parametrize(
        "operation, args",
        [
            ("load", ("plugin_settings",)),
            ("save", ("plugin_settings", {"setting1": "A"})),
            ("delete", ("plugin_settings",)),
        ],
    )
    def test_database_errors_are_wrapped(
        self, repository, db_manager, monkeypatch, operation, args
    ):
        # Setup
        monkeypatch.setattr(db_manager, "get_session", _broken_session)

        # Execute
        with pytest.raises(PersistenceError) as exc_info:
            getattr(repository, operation)(*args)

        # Verify
        assert exc_info.value.operation == operation
        assert isinstance(exc_info.value.original_error, OperationalError)

    def test_corrupt_stored_value_raises_persistence_error(
        self, repository, db_manager
    ):
        """Test a row holding invalid JSON surfaces as a storage failure"""
        # Setup
        with db_manager.engine.begin() as connection:
            connection.execute(
                text(
                    "INSERT INTO plugin_options (name, value) "
                    "VALUES ('plugin_settings', '{not json')"
                )
            )
        store = OptionsStore(build_schema_registry(), repository)

        # Execute
        with pytest.raises(PersistenceError) as exc_info:
            store.get_all()

        # Verify
        assert exc_info.value.operation == "load"

    def test_store_survives_restart(self, repository):
        """Test values written by one store are read by a new one"""
        first = OptionsStore(build_schema_registry(), repository)
        first.set_many({"setting1": "Persisted", "setting5": "option-2"})

        second = OptionsStore(build_schema_registry(), repository)

        assert second.get("setting1") == "Persisted"
        assert second.get("setting5") == "option-2"


class TestInMemoryOptionsRepository:
    """Test cases for the in-memory storage facility."""

    def test_save_load_delete(self):
        repository = InMemoryOptionsRepository()

        repository.save("plugin_settings", {"setting1": "A"})
        assert repository.load("plugin_settings") == {"setting1": "A"}

        repository.delete("plugin_settings")
        assert repository.load("plugin_settings") is None

    def test_unserialisable_value_raises(self):
        repository = InMemoryOptionsRepository()

        with pytest.raises(PersistenceError):
            repository.save("plugin_settings", {"setting1": {1, 2}})

    def test_values_are_copied(self):
        repository = InMemoryOptionsRepository()
        value = {"setting1": "A"}

        repository.save("plugin_settings", value)
        value["setting1"] = "changed"

        assert repository.load("plugin_settings") == {"setting1": "A"}
