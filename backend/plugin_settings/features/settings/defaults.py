"""Built-in plugin options."""

from typing import List

from .models import SchemaEntry, SettingType

DELETE_ALL_KEY = "deleteAll"

BASE_SCHEMA: List[SchemaEntry] = [
    SchemaEntry(
        key="setting1",
        type=SettingType.STRING,
        description="First text setting.",
        default="Default Setting 1",
    ),
    SchemaEntry(
        key="setting2",
        type=SettingType.STRING,
        description="Second text setting.",
        default="Default Setting 2",
    ),
    SchemaEntry(
        key="setting3",
        type=SettingType.BOOLEAN,
        description="First boolean setting.",
        default=False,
    ),
    SchemaEntry(
        key="setting4",
        type=SettingType.BOOLEAN,
        description="Second boolean setting.",
        default=True,
    ),
    SchemaEntry(
        key="setting5",
        type=SettingType.ENUM,
        description="Option selection setting.",
        default="option-1",
        enum_values=("option-1", "option-2"),
        sanitizer="text_field",
    ),
    SchemaEntry(
        key=DELETE_ALL_KEY,
        type=SettingType.BOOLEAN,
        description="Delete all settings on plugin deactivation.",
        default=False,
    ),
]
