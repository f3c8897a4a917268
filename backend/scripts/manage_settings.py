#!/usr/bin/env python3
"""
Plugin settings management script.

This script inspects and changes the persisted plugin settings directly,
without going through the HTTP API.

Usage:
    python scripts/manage_settings.py show
    python scripts/manage_settings.py get setting1
    python scripts/manage_settings.py set setting3 yes
    python scripts/manage_settings.py reset
    python scripts/manage_settings.py schema
    python scripts/manage_settings.py deactivate
"""

import json
import sys
from typing import List

from plugin_settings.core import (
    DatabaseManager,
    PersistenceError,
    UnknownKeyError,
    get_global_config,
    setup_logging,
)
from plugin_settings.features.settings import (
    OptionsStore,
    SettingsGateway,
    SQLAlchemyOptionsRepository,
    build_schema_registry,
    deactivate,
)


def build_store() -> OptionsStore:
    """
    Build an options store on the configured database.

    :returns: OptionsStore instance
    """
    config = get_global_config()
    setup_logging(config.log_level)

    db_manager = DatabaseManager(config.database_url, echo=config.debug)
    db_manager.create_tables()
    registry = build_schema_registry(config.schema_contributors_list)
    return OptionsStore(
        registry,
        SQLAlchemyOptionsRepository(db_manager),
        storage_key=config.options_storage_key,
    )


def print_json(data) -> None:
    print(json.dumps(data, indent=2))


def print_usage() -> None:
    """Print usage information."""
    print("Usage:")
    print("  python scripts/manage_settings.py show              - Show all settings")
    print("  python scripts/manage_settings.py get <key>         - Show one setting")
    print("  python scripts/manage_settings.py set <key> <value> - Change one setting")
    print("  python scripts/manage_settings.py reset             - Delete all saved settings")
    print("  python scripts/manage_settings.py schema            - Describe every setting")
    print("  python scripts/manage_settings.py deactivate        - Run deactivation tasks")


def run(argv: List[str], store: OptionsStore) -> int:
    """
    Execute one command against the store.

    :param argv: Command and its arguments
    :param store: Options store to operate on
    :returns: Process exit code
    """
    if not argv:
        print("Error: Missing command\n")
        print_usage()
        return 1

    command, args = argv[0].lower(), argv[1:]

    try:
        if command == "show" and not args:
            print_json(store.get_all())
        elif command == "get" and len(args) == 1:
            print_json({args[0]: store.get(args[0])})
        elif command == "set" and len(args) == 2:
            value = store.set(args[0], args[1])
            print(f"✅ {args[0]} = {json.dumps(value)}")
        elif command == "reset" and not args:
            store.reset()
            print("✅ All saved settings deleted; defaults are in effect")
        elif command == "schema" and not args:
            print_json(SettingsGateway(store).describe_schema())
        elif command == "deactivate" and not args:
            cleared = deactivate(store)
            print("✅ Settings cleared" if cleared else "Settings kept (deleteAll is off)")
        else:
            print(f"Error: Unknown command or wrong arguments '{' '.join(argv)}'\n")
            print_usage()
            return 1
    except UnknownKeyError as e:
        print(f"Error: {e.message}")
        return 1
    except PersistenceError as e:
        print(f"Error: {e.message}")
        return 2

    return 0


def main() -> None:
    """
    Main entry point.

    :raises SystemExit: With the command's exit code
    """
    try:
        sys.exit(run(sys.argv[1:], build_store()))
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
