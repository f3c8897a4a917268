"""
Settings subsystem exceptions.

Every error raised by the schema registry, the options store and the
settings gateway derives from :class:`SettingsError`. Sanitization never
raises; invalid input is corrected to the schema default instead.
"""

from enum import Enum
from typing import Any, Dict, Optional


class SettingsError(Exception):
    """Base exception for all settings subsystem errors."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        if self.operation:
            return f"[{self.operation}] {self.message}"
        return self.message


class SchemaError(SettingsError):
    """Raised when a schema registration is rejected."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        schema_context = context or {}
        if key is not None:
            schema_context["key"] = key

        super().__init__(
            message=f"Schema error: {message}",
            operation="register",
            context=schema_context,
        )
        self.key = key


class UnknownKeyError(SettingsError, KeyError):
    """Raised when a single-key operation references a key absent from the schema."""

    def __init__(self, key: str, operation: Optional[str] = None):
        super().__init__(
            message=f"Unknown setting key: {key!r}",
            operation=operation,
            context={"key": key},
        )
        self.key = key

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return SettingsError.__str__(self)


class PersistenceError(SettingsError):
    """Raised when the storage facility fails to read or write the options blob."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=f"Persistence error: {message}",
            operation=operation,
            context=context,
            original_error=original_error,
        )


class GatewayErrorReason(str, Enum):
    """Reasons a boundary request can be refused."""

    PERMISSION_DENIED = "permission_denied"
    INVALID_REQUEST = "invalid_request"


class GatewayError(SettingsError):
    """Raised by the settings gateway when a boundary request is refused."""

    def __init__(
        self,
        reason: GatewayErrorReason,
        message: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or reason.value.replace("_", " ").capitalize(),
            operation=operation,
            context=context,
        )
        self.reason = reason
