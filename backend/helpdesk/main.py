"""
Helpdesk Ticketing API - application factory

`create_app` wires settings, the MongoDB handle and the service graph
into a FastAPI instance. Tests pass their own settings and an in-memory
database; production lets both come from the environment.
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database

from .config.settings import Settings, get_settings
from .api.routes import api_router
from .api.middleware import CorrelationIdMiddleware, register_error_handlers
from .repositories.mongo_client import create_client, get_database, create_indexes, health_check
from .scheduler.retention_scheduler import RetentionScheduler
from .services.container import ServiceContainer
from .utils.logger import setup_logging, get_logger

logger = get_logger(__name__)

VERSION = "1.0.0"
API_NAME = "Helpdesk Ticketing API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: start the daily retention job if RETENTION_SCHEDULE_ENABLED.
    Shutdown: stop it and close the MongoDB client this app opened.
    """
    settings: Settings = app.state.settings
    logger.info(f"{API_NAME} {VERSION} starting ({settings.environment})")

    scheduler: Optional[RetentionScheduler] = None
    if settings.retention_schedule_enabled:
        scheduler = RetentionScheduler(settings, app.state.services.retention)
        scheduler.start()

    yield

    if scheduler:
        scheduler.stop()
    client = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()
        logger.info("MongoDB connection closed")
    logger.info(f"{API_NAME} stopped")


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None
) -> FastAPI:
    """
    Build the application

    Args:
        settings: Read from the environment when omitted
        database: Opened from settings.mongo_uri when omitted; indexes are
            created on the opened database
    """
    settings = settings or get_settings()
    setup_logging(settings)

    application = FastAPI(
        title=API_NAME,
        description="Role-hierarchical IT helpdesk: tickets, accounts and reporting",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )

    if database is None:
        client = create_client(settings)
        database = get_database(client, settings)
        create_indexes(database)
        application.state.mongo_client = client

    application.state.settings = settings
    application.state.db = database
    application.state.services = ServiceContainer(settings, database)

    _configure_middleware(application, settings)
    register_error_handlers(application)
    _configure_routes(application)

    return application


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    # Browsers reject credentialed requests to a wildcard origin
    allow_all = settings.cors_origins.strip() == "*"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_origins_list,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )
    app.add_middleware(CorrelationIdMiddleware)


def _configure_routes(app: FastAPI) -> None:
    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    async def health(request: Request):
        """Liveness plus a MongoDB ping; no authentication"""
        mongo = health_check(request.app.state.db)
        return {
            "status": "healthy" if mongo.get("status") == "healthy" else "degraded",
            "version": VERSION,
            "environment": request.app.state.settings.environment,
            "mongo": mongo
        }

    @app.get("/", tags=["Health"])
    async def root(request: Request):
        return {
            "name": API_NAME,
            "version": VERSION,
            "docs": "/api/docs" if request.app.state.settings.debug else None
        }
