"""
Tests for the schema registry.
"""

import json

import pytest

from plugin_settings.core.exceptions import SchemaError
from plugin_settings.features.settings.models import SchemaEntry, SettingType
from plugin_settings.features.settings.sanitizer import sanitize, sanitize_text_field
from plugin_settings.features.settings.schema import (
    SchemaRegistry,
    build_schema_registry,
    load_contributor,
)


@pytest.fixture
def registry():
    return build_schema_registry()


def test_base_schema_in_declaration_order(registry):
    """Test the base options are registered in declaration order"""
    assert list(registry.describe()) == [
        "setting1",
        "setting2",
        "setting3",
        "setting4",
        "setting5",
        "deleteAll",
    ]


def test_named_sanitizer_is_resolved_on_registration(registry):
    """Test sanitizer names are resolved into callables"""
    assert registry.get("setting5").sanitize_callback is sanitize_text_field


def test_describe_is_read_only(registry):
    """Test describe() cannot be used to mutate the schema"""
    view = registry.describe()

    with pytest.raises(TypeError):
        view["extra"] = SchemaEntry(key="extra", type=SettingType.STRING, default="")


@pytest.mark.parametrize(
    "entry",
    [
        SchemaEntry(key="count", type=SettingType.INTEGER, default="three"),
        SchemaEntry(key="count", type=SettingType.INTEGER, default=True),
        SchemaEntry(key="flag", type=SettingType.BOOLEAN, default="yes"),
        SchemaEntry(key="title", type=SettingType.STRING, default=5),
        SchemaEntry(key="mode", type=SettingType.ENUM, default="a"),
        SchemaEntry(
            key="mode", type=SettingType.ENUM, default="c", enum_values=("a", "b")
        ),
        SchemaEntry(
            key="flag", type=SettingType.BOOLEAN, default=True, enum_values=(True,)
        ),
        SchemaEntry(key="", type=SettingType.STRING, default=""),
        SchemaEntry(
            key="ratio", type=SettingType.ENUM, default=1.5, enum_values=(1.5, 2.5)
        ),
        SchemaEntry(
            key="mode", type=SettingType.ENUM, default="a", enum_values=("a", None)
        ),
        SchemaEntry(key="schema", type=SettingType.STRING, default=""),
    ],
)
def test_invalid_declarations_are_rejected(registry, entry):
    """Test defaults must satisfy their own type and enum constraint"""
    with pytest.raises(SchemaError):
        registry.register([entry])


def test_conflicting_type_is_rejected_without_partial_apply(registry):
    """Test a rejected batch leaves the registry unchanged"""
    # Setup
    batch = [
        SchemaEntry(key="extra", type=SettingType.STRING, default="x"),
        SchemaEntry(key="setting3", type=SettingType.STRING, default="no"),
    ]

    # Execute
    with pytest.raises(SchemaError) as exc_info:
        registry.register(batch)

    # Verify
    assert exc_info.value.key == "setting3"
    assert "extra" not in registry
    assert registry.get("setting3").type is SettingType.BOOLEAN


def test_same_type_override_keeps_position(registry):
    """Test collaborators can override an existing key"""
    registry.register(
        [SchemaEntry(key="setting1", type=SettingType.STRING, default="Overridden")]
    )

    assert registry.get("setting1").default == "Overridden"
    assert list(registry.describe())[0] == "setting1"


def test_unknown_sanitizer_is_rejected(registry):
    """Test sanitizer names must be known at registration"""
    entry = SchemaEntry(
        key="slug", type=SettingType.STRING, default="home", sanitizer="nope"
    )

    with pytest.raises(SchemaError):
        registry.register([entry])


def test_custom_sanitizer_registration(registry):
    """Test a registered sanitizer is used by entries naming it"""
    # Setup
    registry.register_sanitizer("upper", lambda value: str(value).upper())
    registry.register(
        [
            SchemaEntry(
                key="code", type=SettingType.STRING, default="ABC", sanitizer="upper"
            )
        ]
    )

    # Execute
    result = sanitize("xyz", registry.get("code"))

    # Verify
    assert result == "XYZ"


def test_registration_after_freeze_is_rejected(registry):
    """Test the registry is immutable once frozen"""
    registry.freeze()

    assert registry.is_frozen
    with pytest.raises(SchemaError):
        registry.register(
            [SchemaEntry(key="late", type=SettingType.STRING, default="")]
        )
    with pytest.raises(SchemaError):
        registry.register_sanitizer("late", str)
    assert "late" not in registry


def test_register_mapping_accepts_json_schema_properties():
    """Test property declarations in the plugin's filter format"""
    # Setup
    registry = SchemaRegistry()

    # Execute
    registry.register_mapping(
        {
            "layout": {
                "type": "string",
                "description": "Layout selection.",
                "enum": ["grid", "list"],
                "default": "grid",
                "sanitize_callback": "text_field",
            },
            "perPage": {"type": "integer", "default": 10},
        }
    )

    # Verify
    layout = registry.get("layout")
    assert layout.type is SettingType.STRING
    assert layout.enum_values == ("grid", "list")
    assert layout.sanitize_callback is sanitize_text_field
    assert registry.get("perPage").default == 10


@pytest.mark.parametrize(
    "declaration",
    [{"type": "float", "default": 1.5}, {"default": "x"}],
)
def test_register_mapping_rejects_malformed_declarations(declaration):
    """Test malformed declarations surface as SchemaError"""
    with pytest.raises(SchemaError):
        SchemaRegistry().register_mapping({"broken": declaration})


def test_contributors_run_in_order():
    """Test contributors are applied after the base options, in order"""
    # Setup
    calls = []

    def add_color(registry):
        calls.append("add_color")
        registry.register(
            [SchemaEntry(key="color", type=SettingType.STRING, default="red")]
        )

    def override_color(registry):
        calls.append("override_color")
        registry.register(
            [SchemaEntry(key="color", type=SettingType.STRING, default="blue")]
        )

    # Execute
    registry = build_schema_registry([add_color, override_color])

    # Verify
    assert calls == ["add_color", "override_color"]
    assert registry.get("color").default == "blue"
    assert list(registry.describe())[-1] == "color"
    assert not registry.is_frozen


def test_custom_base_entries():
    """Test the base set can be replaced"""
    registry = build_schema_registry(
        base_entries=[SchemaEntry(key="only", type=SettingType.BOOLEAN, default=False)]
    )

    assert list(registry.describe()) == ["only"]


class TestLoadContributor:
    """Test cases for contributor import paths."""

    def test_colon_path(self):
        assert load_contributor("json:dumps") is json.dumps

    def test_dotted_path(self):
        assert load_contributor("json.dumps") is json.dumps

    @pytest.mark.parametrize(
        "path", ["json:missing", "no_such_module_xyz:thing", "json:__name__"]
    )
    def test_bad_paths(self, path):
        with pytest.raises(SchemaError):
            load_contributor(path)
