"""Plugin activation and deactivation tasks."""

from typing import Optional, Tuple

import structlog

from .defaults import DELETE_ALL_KEY
from .repository import OptionsRepositoryInterface
from .store import OptionsStore

logger = structlog.get_logger(__name__)


def version_option_name(storage_key: str) -> str:
    """Name of the row recording the installed plugin version."""
    return f"{storage_key}_version"


def _version_tuple(version: str) -> Tuple[int, ...]:
    parts = []
    for part in version.split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def activate(
    repository: OptionsRepositoryInterface, storage_key: str, version: str
) -> bool:
    """
    Record the running plugin version if it is newer than the stored one.

    :param repository: Storage facility
    :param storage_key: Identifier of the options blob
    :param version: Version of the running plugin
    :returns: True if the stored version was upgraded
    """
    name = version_option_name(storage_key)
    stored: Optional[str] = repository.load(name)
    current = stored if isinstance(stored, str) else "0.0.0"

    if _version_tuple(current) >= _version_tuple(version):
        logger.debug("plugin_version_current", version=current)
        return False

    repository.save(name, version)
    logger.info("plugin_version_upgraded", previous=current, version=version)
    return True


def deactivate(store: OptionsStore) -> bool:
    """
    Clear all settings when the ``deleteAll`` option is enabled.

    :param store: Options store
    :returns: True if the settings were cleared
    """
    if not store.get(DELETE_ALL_KEY):
        logger.info("plugin_deactivated", settings_cleared=False)
        return False

    store.reset()
    logger.info("plugin_deactivated", settings_cleared=True)
    return True
