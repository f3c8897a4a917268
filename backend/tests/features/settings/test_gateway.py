"""
Tests for the settings gateway.
"""

import pytest

from plugin_settings.core.exceptions import (
    GatewayError,
    GatewayErrorReason,
    UnknownKeyError,
)
from plugin_settings.features.settings.gateway import SettingsGateway
from plugin_settings.features.settings.repository import InMemoryOptionsRepository
from plugin_settings.features.settings.schema import build_schema_registry
from plugin_settings.features.settings.store import OptionsStore


@pytest.fixture
def repository():
    return InMemoryOptionsRepository()


@pytest.fixture
def store(repository):
    return OptionsStore(build_schema_registry(), repository)


@pytest.fixture
def gateway(store):
    return SettingsGateway(store)


def test_read_settings_delegates_to_store(gateway, store):
    assert gateway.read_settings() == store.get_all()


def test_write_settings_authorized(gateway):
    """Test an authorized bulk write returns the new snapshot"""
    snapshot = gateway.write_settings(
        {"setting1": "From form", "setting3": "yes", "csrf_token": "abc"},
        authorized=True,
    )

    assert snapshot["setting1"] == "From form"
    assert snapshot["setting3"] is True
    assert "csrf_token" not in snapshot


@pytest.mark.parametrize("authorized", [False, None, "yes", 1])
def test_write_settings_requires_authorization(gateway, repository, authorized):
    """Test anything but an explicit True is refused without touching the store"""
    with pytest.raises(GatewayError) as exc_info:
        gateway.write_settings({"setting1": "Nope"}, authorized=authorized)

    assert exc_info.value.reason is GatewayErrorReason.PERMISSION_DENIED
    assert repository.load("plugin_settings") is None


@pytest.mark.parametrize("payload", [["setting1"], "setting1=x", None, 42])
def test_write_settings_rejects_non_mapping(gateway, repository, payload):
    with pytest.raises(GatewayError) as exc_info:
        gateway.write_settings(payload, authorized=True)

    assert exc_info.value.reason is GatewayErrorReason.INVALID_REQUEST
    assert repository.load("plugin_settings") is None


def test_permission_is_checked_before_payload(gateway):
    with pytest.raises(GatewayError) as exc_info:
        gateway.write_settings(["not", "a", "mapping"], authorized=False)

    assert exc_info.value.reason is GatewayErrorReason.PERMISSION_DENIED


def test_single_key_operations(gateway):
    assert gateway.write_setting("setting5", "option-2", authorized=True) == "option-2"
    assert gateway.read_setting("setting5") == "option-2"

    with pytest.raises(UnknownKeyError):
        gateway.read_setting("nope")
    with pytest.raises(UnknownKeyError):
        gateway.write_setting("nope", "x", authorized=True)
    with pytest.raises(GatewayError):
        gateway.write_setting("setting5", "option-1", authorized=False)


def test_reset_settings(gateway, store):
    store.set("setting2", "Changed")

    with pytest.raises(GatewayError):
        gateway.reset_settings(authorized=False)
    assert store.get("setting2") == "Changed"

    snapshot = gateway.reset_settings(authorized=True)
    assert snapshot["setting2"] == "Default Setting 2"


def test_describe_schema(gateway, store):
    """Test the schema description carries current values in declaration order"""
    # Setup
    store.set("setting5", "option-2")

    # Execute
    description = gateway.describe_schema()

    # Verify
    assert [item["key"] for item in description] == [
        "setting1",
        "setting2",
        "setting3",
        "setting4",
        "setting5",
        "deleteAll",
    ]
    assert description[0] == {
        "key": "setting1",
        "type": "string",
        "description": "First text setting.",
        "default": "Default Setting 1",
        "currentValue": "Default Setting 1",
    }
    assert description[4] == {
        "key": "setting5",
        "type": "enum",
        "description": "Option selection setting.",
        "default": "option-1",
        "enumValues": ["option-1", "option-2"],
        "currentValue": "option-2",
    }
