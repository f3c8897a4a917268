"""Dependency injection for settings feature."""

import secrets
from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from plugin_settings.core.config import ServiceConfig
from .gateway import SettingsGateway


def get_service_config(request: Request) -> ServiceConfig:
    """
    Get the configuration the application was created with.

    :param request: Current request
    :returns: ServiceConfig instance
    """
    return request.app.state.config


def get_settings_gateway(request: Request) -> SettingsGateway:
    """
    Get the settings gateway owned by the application.

    :param request: Current request
    :returns: SettingsGateway instance
    """
    return request.app.state.settings_gateway


def get_settings_authorization(
    config: Annotated[ServiceConfig, Depends(get_service_config)],
    x_settings_token: Annotated[Optional[str], Header()] = None,
) -> bool:
    """
    Decide whether the caller may modify settings.

    Hosts with their own authentication override this dependency; the
    default accepts the configured admin token and denies everything when
    no token is configured.

    :returns: True if the caller is authorized
    """
    expected = config.settings_admin_token
    if not expected or not x_settings_token:
        return False
    return secrets.compare_digest(x_settings_token.encode(), expected.encode())


# Type aliases for dependency injection
SettingsGatewayDep = Annotated[SettingsGateway, Depends(get_settings_gateway)]
SettingsAuthorizationDep = Annotated[bool, Depends(get_settings_authorization)]
