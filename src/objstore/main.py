"""FastAPI application entrypoint for objstore."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from objstore import __version__
from objstore.api import objects_router
from objstore.config import Settings, StackConfig, load_config
from objstore.core.objects.storage import create_object_storage
from objstore.core.objects.store import ObjectStore
from objstore.observability.logging import (
    RequestIDMiddleware,
    configure_logging,
    get_logger,
)
from objstore.observability.metrics import (
    MetricsMiddleware,
    metrics_endpoint,
    setup_metrics,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Prepares the durable storage root and builds the single ObjectStore
    shared by every request handler. A storage root that cannot be created
    aborts startup.
    """
    config: StackConfig = app.state.config

    configure_logging(
        level=config.logging.level,
        json_logs=config.logging.json_logs,
        enable_access_logs=config.logging.enable_access_logs,
    )
    logger.info("Starting objstore...", storage_path=str(config.storage.base_path))

    storage = create_object_storage(config.storage)
    try:
        await storage.initialize()
    except OSError as e:
        logger.error(
            "Failed to prepare storage root",
            storage_path=str(config.storage.base_path),
            error=str(e),
        )
        raise

    app.state.object_storage = storage
    app.state.object_store = ObjectStore(storage)

    if config.enable_metrics:
        setup_metrics("objstore", __version__)

    logger.info("objstore started successfully")

    yield

    logger.info("Shutting down objstore...")
    await storage.close()
    logger.info("Shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings()
    config = load_config(settings)

    app = FastAPI(
        title="objstore",
        description="Minimal object storage with a write-through memory cache",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    # Last added runs first
    if config.enable_metrics:
        app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(objects_router)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        store: ObjectStore = request.app.state.object_store
        return {"status": "healthy", "objects": await store.stats()}

    if config.enable_metrics:
        app.get("/metrics")(metrics_endpoint)

    add_exception_handlers(app)

    return app


def add_exception_handlers(app: FastAPI) -> None:
    """Add global exception handlers."""

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Global exception handler for unhandled errors."""
        logger.error(
            "Unhandled exception",
            exception_type=type(exc).__name__,
            exception_message=str(exc),
            path=request.url.path,
            method=request.method,
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred",
                "request_id": structlog.contextvars.get_contextvars().get(
                    "request_id"
                ),
            },
        )


# Create the app instance
app = create_app()


def main():
    """Run the server."""
    import uvicorn

    settings = Settings()
    config = app.state.config

    uvicorn.run(
        "objstore.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
