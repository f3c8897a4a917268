"""Settings API endpoints mapping HTTP requests onto the settings gateway."""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, HTTPException, status
import structlog

from plugin_settings.core.exceptions import (
    GatewayError,
    GatewayErrorReason,
    PersistenceError,
    UnknownKeyError,
)
from .dependencies import SettingsAuthorizationDep, SettingsGatewayDep
from .schemas import (
    SchemaFieldResponse,
    SettingValue,
    SettingValueResponse,
    SettingValueUpdate,
    SettingsErrorResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])

_GATEWAY_STATUS = {
    GatewayErrorReason.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    GatewayErrorReason.INVALID_REQUEST: 422,
}


def _error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    return {code: {"model": SettingsErrorResponse} for code in status_codes}


_READ_ERRORS = _error_responses(status.HTTP_503_SERVICE_UNAVAILABLE)
_WRITE_ERRORS = _error_responses(
    status.HTTP_403_FORBIDDEN, status.HTTP_503_SERVICE_UNAVAILABLE
)
_KEY_READ_ERRORS = _error_responses(
    status.HTTP_404_NOT_FOUND, status.HTTP_503_SERVICE_UNAVAILABLE
)
_KEY_WRITE_ERRORS = _error_responses(
    status.HTTP_403_FORBIDDEN,
    status.HTTP_404_NOT_FOUND,
    status.HTTP_503_SERVICE_UNAVAILABLE,
)


def _gateway_http_error(e: GatewayError) -> HTTPException:
    return HTTPException(status_code=_GATEWAY_STATUS[e.reason], detail=e.message)


def _unknown_key_http_error(e: UnknownKeyError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


def _persistence_http_error(e: PersistenceError, operation: str) -> HTTPException:
    logger.error(
        "settings_storage_unavailable",
        operation=operation,
        error=str(e),
        exc_info=True,
    )
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Settings storage is unavailable",
    )


@router.get("", response_model=Dict[str, SettingValue], responses=_READ_ERRORS)
def read_settings(gateway: SettingsGatewayDep):
    """
    Get every setting.

    Keys that were never saved report their schema default.
    """
    try:
        return gateway.read_settings()
    except PersistenceError as e:
        raise _persistence_http_error(e, "read_settings")


@router.api_route(
    "",
    methods=["POST", "PATCH"],
    response_model=Dict[str, SettingValue],
    responses=_WRITE_ERRORS,
)
def write_settings(
    gateway: SettingsGatewayDep,
    authorized: SettingsAuthorizationDep,
    payload: Any = Body(...),
):
    """
    Update several settings at once.

    The body maps setting keys to raw values. Values are sanitized against
    the schema (invalid input falls back to the default) and unknown keys
    are ignored. Returns the full settings after the update.
    """
    try:
        return gateway.write_settings(payload, authorized=authorized)
    except GatewayError as e:
        raise _gateway_http_error(e)
    except PersistenceError as e:
        raise _persistence_http_error(e, "write_settings")


@router.delete("", response_model=Dict[str, SettingValue], responses=_WRITE_ERRORS)
def reset_settings(
    gateway: SettingsGatewayDep,
    authorized: SettingsAuthorizationDep,
):
    """
    Delete every saved setting.

    Returns the schema defaults that are now in effect.
    """
    try:
        return gateway.reset_settings(authorized=authorized)
    except GatewayError as e:
        raise _gateway_http_error(e)
    except PersistenceError as e:
        raise _persistence_http_error(e, "reset_settings")


@router.get(
    "/schema",
    response_model=List[SchemaFieldResponse],
    response_model_exclude_none=True,
    responses=_READ_ERRORS,
)
def describe_schema(gateway: SettingsGatewayDep):
    """
    Describe every setting for clients that render their own settings form.

    Each item carries the key, type, description, default, allowed values
    for enumerations, and the current value.
    """
    try:
        return gateway.describe_schema()
    except PersistenceError as e:
        raise _persistence_http_error(e, "describe_schema")


@router.get(
    "/{key}", response_model=SettingValueResponse, responses=_KEY_READ_ERRORS
)
def read_setting(key: str, gateway: SettingsGatewayDep):
    """Get a single setting."""
    try:
        return SettingValueResponse(key=key, value=gateway.read_setting(key))
    except UnknownKeyError as e:
        raise _unknown_key_http_error(e)
    except PersistenceError as e:
        raise _persistence_http_error(e, "read_setting")


@router.put(
    "/{key}", response_model=SettingValueResponse, responses=_KEY_WRITE_ERRORS
)
def write_setting(
    key: str,
    update: SettingValueUpdate,
    gateway: SettingsGatewayDep,
    authorized: SettingsAuthorizationDep,
):
    """
    Update a single setting.

    Returns the sanitized value that was stored.
    """
    try:
        value = gateway.write_setting(key, update.value, authorized=authorized)
        return SettingValueResponse(key=key, value=value)
    except GatewayError as e:
        raise _gateway_http_error(e)
    except UnknownKeyError as e:
        raise _unknown_key_http_error(e)
    except PersistenceError as e:
        raise _persistence_http_error(e, "write_setting")
