"""Type-directed sanitization of raw option values.

``sanitize`` never raises. Input that cannot be coerced into the entry's
type, or that falls outside its enumeration, is replaced by the entry's
default so that callers such as settings forms always get a usable value.
"""

import re
from typing import Any, Callable, Dict, Optional, Sequence

import structlog

from .models import OptionValue, SchemaEntry, SettingType

logger = structlog.get_logger(__name__)

DEFAULT_STRING_SANITIZER = "text_field"

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_LINE_BREAKS_RE = re.compile(r"[\r\n\t ]+")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_KEY_INVALID_RE = re.compile(r"[^a-z0-9_\-]")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


def _scalar_to_str(value: Any) -> str:
    """Cast scalars to text; anything else becomes the empty string."""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, (str, int, float)):
        try:
            return str(value)
        except ValueError:
            # int too large for str conversion
            return ""
    return ""


def _clean_text(value: Any, keep_newlines: bool) -> str:
    text = _scalar_to_str(value)
    if "<" in text:
        text = _SCRIPT_STYLE_RE.sub("", text)
        text = _TAG_RE.sub("", text)
    if not keep_newlines:
        text = _LINE_BREAKS_RE.sub(" ", text)
    text = _CONTROL_CHARS_RE.sub("", text)
    return text.strip()


def sanitize_text_field(value: Any) -> str:
    """Strip markup and control characters and collapse whitespace to single spaces."""
    return _clean_text(value, keep_newlines=False)


def sanitize_textarea_field(value: Any) -> str:
    """Like :func:`sanitize_text_field` but keeps line breaks."""
    return _clean_text(value, keep_newlines=True)


def sanitize_key(value: Any) -> str:
    """Lowercase and keep only alphanumerics, dashes and underscores."""
    return _KEY_INVALID_RE.sub("", _scalar_to_str(value).lower())


BUILTIN_SANITIZERS: Dict[str, Callable[[Any], Any]] = {
    "text_field": sanitize_text_field,
    "textarea_field": sanitize_textarea_field,
    "key": sanitize_key,
}


def parse_bool(value: Any) -> Optional[bool]:
    """Permissive truthy/falsy parse; ``None`` when the input is not recognized."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
    return None


def parse_int(value: Any) -> Optional[int]:
    """Base-10 integer parse; ``None`` when the input is not an integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        candidate = value.strip()
        if _INTEGER_RE.fullmatch(candidate):
            try:
                return int(candidate, 10)
            except ValueError:
                return None
    return None


def is_member(value: Any, allowed: Sequence[OptionValue]) -> bool:
    """Strict membership: type and value must both match."""
    return any(type(value) is type(choice) and value == choice for choice in allowed)


def _fallback(entry: SchemaEntry, reason: str) -> OptionValue:
    logger.debug(
        "setting_value_corrected_to_default",
        key=entry.key,
        type=entry.type.value,
        reason=reason,
    )
    return entry.default


def _resolve_callback(entry: SchemaEntry) -> Optional[Callable[[Any], Any]]:
    if entry.sanitize_callback is not None:
        return entry.sanitize_callback
    if entry.sanitizer is not None:
        return BUILTIN_SANITIZERS.get(entry.sanitizer)
    return None


def _apply_callback(
    callback: Callable[[Any], Any], raw_value: Any, entry: SchemaEntry
) -> tuple[bool, Any]:
    try:
        return True, callback(raw_value)
    except Exception as e:
        logger.warning(
            "custom_sanitizer_failed",
            key=entry.key,
            sanitizer=entry.sanitizer,
            error=str(e),
            error_type=type(e).__name__,
        )
        return False, None


def _sanitize_string(raw_value: Any, entry: SchemaEntry) -> OptionValue:
    callback = _resolve_callback(entry) or BUILTIN_SANITIZERS[DEFAULT_STRING_SANITIZER]
    ok, value = _apply_callback(callback, raw_value, entry)
    if not ok:
        return _fallback(entry, "sanitizer_failed")
    if not isinstance(value, str):
        return _fallback(entry, "not_a_string")
    if entry.enum_values is not None and not is_member(value, entry.enum_values):
        return _fallback(entry, "not_in_enum")
    return value


def _sanitize_enum(raw_value: Any, entry: SchemaEntry) -> OptionValue:
    value = raw_value
    callback = _resolve_callback(entry)
    if callback is not None:
        ok, value = _apply_callback(callback, raw_value, entry)
        if not ok:
            return _fallback(entry, "sanitizer_failed")
    if not is_member(value, entry.enum_values or ()):
        return _fallback(entry, "not_in_enum")
    return value


def _sanitize_boolean(raw_value: Any, entry: SchemaEntry) -> OptionValue:
    parsed = parse_bool(raw_value)
    if parsed is None:
        return _fallback(entry, "unparseable_boolean")
    return parsed


def _sanitize_integer(raw_value: Any, entry: SchemaEntry) -> OptionValue:
    parsed = parse_int(raw_value)
    if parsed is None:
        return _fallback(entry, "unparseable_integer")
    return parsed


_SANITIZERS_BY_TYPE: Dict[SettingType, Callable[[Any, SchemaEntry], OptionValue]] = {
    SettingType.STRING: _sanitize_string,
    SettingType.BOOLEAN: _sanitize_boolean,
    SettingType.INTEGER: _sanitize_integer,
    SettingType.ENUM: _sanitize_enum,
}


def sanitize(raw_value: Any, entry: SchemaEntry) -> OptionValue:
    """Map a raw input value onto a value that satisfies ``entry``.

    :param raw_value: Untrusted input (form field, JSON body, stored value)
    :param entry: Schema entry the value belongs to
    :returns: Sanitized value; the entry default when the input is invalid
    """
    return _SANITIZERS_BY_TYPE[entry.type](raw_value, entry)
