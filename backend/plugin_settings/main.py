"""FastAPI application factory for the plugin settings service."""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from plugin_settings.core import (
    DatabaseManager,
    PersistenceError,
    ServiceConfig,
    get_config,
    setup_logging,
)
from plugin_settings.features.settings import (
    OptionsRepositoryInterface,
    OptionsStore,
    SchemaRegistry,
    SettingsGateway,
    SQLAlchemyOptionsRepository,
    activate,
    build_schema_registry,
    settings_router,
)

logger = structlog.get_logger(__name__)

# OpenAPI tags metadata
tags_metadata = [
    {
        "name": "settings",
        "description": "Plugin settings: read, update, reset and schema description.",
    },
    {
        "name": "health",
        "description": "Health check and system status endpoints.",
    },
]


def create_app(
    config: Optional[ServiceConfig] = None,
    repository: Optional[OptionsRepositoryInterface] = None,
    registry: Optional[SchemaRegistry] = None,
) -> FastAPI:
    """
    Build the application and wire the settings store explicitly.

    :param config: Service configuration; loaded from the environment if omitted
    :param repository: Storage facility; a SQLAlchemy repository on
        ``config.database_url`` if omitted
    :param registry: Schema registry; bootstrapped from the base options and
        ``config.schema_contributors`` if omitted
    :returns: Configured FastAPI application
    """
    config = config or get_config()
    setup_logging(config.log_level)

    db_manager: Optional[DatabaseManager] = None
    if repository is None:
        db_manager = DatabaseManager(config.database_url, echo=config.debug)
        db_manager.create_tables()
        repository = SQLAlchemyOptionsRepository(db_manager)

    if registry is None:
        registry = build_schema_registry(config.schema_contributors_list)

    store = OptionsStore(registry, repository, storage_key=config.options_storage_key)
    gateway = SettingsGateway(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting up plugin settings service")
        try:
            activate(repository, config.options_storage_key, config.plugin_version)
        except PersistenceError as e:
            logger.error(
                "Plugin activation failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            # Don't fail startup if activation fails
        yield
        logger.info("Shutting down plugin settings service")
        if db_manager is not None:
            db_manager.close()

    app = FastAPI(
        title="Plugin Settings Service",
        description="""
        Schema-driven plugin settings.

        ## Features

        * **Settings**: Read and update plugin options; values are sanitized against the schema
        * **Schema**: Describe every option so clients can render their own forms
        * **Reset**: Clear all saved options and fall back to defaults

        ## Authorization

        Write endpoints require the `X-Settings-Token` header to match the
        configured `SETTINGS_ADMIN_TOKEN`. Hosts with their own authentication
        override the `get_settings_authorization` dependency.
        """,
        version=config.plugin_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
        debug=config.debug,
    )

    # Explicitly owned instances, resolved by dependencies per request
    app.state.config = config
    app.state.options_store = store
    app.state.settings_gateway = gateway

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(settings_router, prefix="/api/v1", tags=["settings"])

    @app.get("/health", tags=["health"])
    async def health_check() -> Dict[str, Any]:
        """
        Health check endpoint.

        Returns the health status of the application including:
        - Overall health status
        - Application version
        - Whether the settings store has loaded its data
        """
        return {
            "status": "healthy",
            "message": "Application is running",
            "version": config.plugin_version,
            "settings_state": store.state.value,
        }

    return app
