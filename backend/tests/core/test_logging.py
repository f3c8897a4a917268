"""
Tests for structured logging setup.
"""

import json
import logging

import structlog

from plugin_settings.core.logging import setup_logging


def test_setup_logging_renders_json(caplog):
    """Test events are emitted through stdlib logging as JSON"""
    # Setup
    setup_logging("INFO")
    caplog.set_level(logging.INFO)

    # Execute
    structlog.get_logger("plugin_settings.tests").info(
        "settings_updated", keys=["setting1"]
    )

    # Verify
    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "settings_updated"
    assert payload["keys"] == ["setting1"]
    assert payload["level"] == "info"
    assert payload["logger"] == "plugin_settings.tests"
