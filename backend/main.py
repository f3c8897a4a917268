"""Application entry point for the plugin settings service."""

import uvicorn
from plugin_settings.core.config import get_global_config

if __name__ == "__main__":
    config = get_global_config()
    uvicorn.run(
        "plugin_settings.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=config.debug,
        log_level=config.log_level.lower(),
    )
