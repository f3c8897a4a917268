"""Domain models for the settings schema."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Tuple, Union

OptionValue = Union[str, bool, int]
SanitizeCallback = Callable[[Any], Any]


class SettingType(str, Enum):
    """Types an option can be declared with."""

    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    ENUM = "enum"


@dataclass(frozen=True)
class SchemaEntry:
    """Declaration of one recognized option key.

    ``sanitizer`` names a sanitization function known to the schema registry;
    the registry resolves it into ``sanitize_callback`` when the entry is
    registered.
    """

    key: str
    type: SettingType
    default: OptionValue
    description: str = ""
    enum_values: Optional[Tuple[OptionValue, ...]] = None
    sanitizer: Optional[str] = None
    sanitize_callback: Optional[SanitizeCallback] = field(
        default=None, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        # Accept plain strings and lists from callers building entries by hand
        if not isinstance(self.type, SettingType):
            object.__setattr__(self, "type", SettingType(self.type))
        if self.enum_values is not None and not isinstance(self.enum_values, tuple):
            object.__setattr__(self, "enum_values", tuple(self.enum_values))

    @classmethod
    def from_mapping(cls, key: str, data: Mapping[str, Any]) -> "SchemaEntry":
        """Build an entry from a JSON-schema style property declaration.

        Recognizes ``type``, ``default``, ``description``, ``enum`` (or
        ``enum_values``) and ``sanitizer`` (or ``sanitize_callback`` holding
        a sanitizer name).
        """
        enum_values = data.get("enum_values", data.get("enum"))
        sanitizer = data.get("sanitizer", data.get("sanitize_callback"))
        return cls(
            key=key,
            type=SettingType(data["type"]),
            default=data.get("default"),
            description=data.get("description", ""),
            enum_values=tuple(enum_values) if enum_values is not None else None,
            sanitizer=sanitizer,
        )

    def to_dict(self) -> dict:
        """Return a serialisable description of the entry."""
        description = {
            "key": self.key,
            "type": self.type.value,
            "description": self.description,
            "default": self.default,
        }
        if self.enum_values is not None:
            description["enumValues"] = list(self.enum_values)
        return description
