"""FastAPI application factory for the model catalog server."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .. import __version__
from ..config import Config, get_config
from ..defaults import DefaultsStore
from ..models import ModelRegistry
from .dependencies import configure_server, get_discovery, shutdown_discovery, start_refresher
from .routes import discovery_router, health_router, models_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Runs the first discovery pass on startup and stops refreshing on shutdown.
    """
    logger.info("Starting model catalog server...")

    if app.state.discover_on_startup:
        discovery = get_discovery()
        result = await run_in_threadpool(discovery.discover)
        if result.enabled:
            logger.info(f"Discovered {len(result.models)} local models at {result.endpoint}")
        start_refresher()

    yield

    logger.info("Shutting down model catalog server...")
    shutdown_discovery()


def create_app(
    config: Config | None = None,
    registry: ModelRegistry | None = None,
    defaults: DefaultsStore | None = None,
    discover_on_startup: bool = True,
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Optional Config object (uses get_config() if not provided)
        registry: Registry to serve; a new one is created otherwise
        defaults: Defaults store to serve; a new one is created otherwise
        discover_on_startup: Run a discovery pass when the server starts
        cors_origins: List of allowed CORS origins

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = get_config()

    server_config = config.server
    configure_server(config, registry, defaults)

    app = FastAPI(
        title="LLM Discovery API",
        description="Catalog of models discovered on a local inference server",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if server_config.enable_docs else None,
        redoc_url="/redoc" if server_config.enable_docs else None,
        openapi_url="/openapi.json" if server_config.enable_docs else None,
    )
    app.state.discover_on_startup = discover_on_startup

    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(models_router)
    app.include_router(discovery_router)
    app.include_router(health_router)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": {"message": "Internal server error", "type": "internal_error"}},
        )

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "name": "LLM Discovery API",
            "version": __version__,
            "description": "Catalog of models discovered on a local inference server",
            "documentation": "/docs",
            "health": "/health",
        }

    return app


class DiscoveryServer:
    """High-level server interface.

    Example:
        server = DiscoveryServer(port=8100)
        server.start()
        # Or use config from file:
        server = DiscoveryServer.from_config("llm_discovery.yaml")
    """

    def __init__(
        self,
        port: int | None = None,
        host: str | None = None,
        log_level: str | None = None,
        config: Config | None = None,
        **kwargs: Any,
    ):
        """Initialize server.

        Args:
            port: HTTP port (overrides config)
            host: Bind address (overrides config)
            log_level: Logging level (overrides config)
            config: Config object (uses get_config() if not provided)
            **kwargs: Additional arguments for create_app
        """
        self.config = config or get_config()
        self.port = port or self.config.server.port
        self.host = host or self.config.server.host
        self.log_level = (log_level or self.config.logging.level).lower()
        self.kwargs = kwargs
        self.app: FastAPI | None = None
        self._server: Any | None = None

    @classmethod
    def from_config(
        cls, config_path: str | None = None, profile: str | None = None
    ) -> "DiscoveryServer":
        """Create DiscoveryServer from config file."""
        from ..config import load_config

        return cls(config=load_config(config_path, profile))

    def create_app(self) -> FastAPI:
        """Create FastAPI application."""
        self.app = create_app(config=self.config, **self.kwargs)
        return self.app

    def start(self) -> None:
        """Start the server (blocking)."""
        import uvicorn

        app = self.app or self.create_app()

        logger.info(f"Starting server on {self.host}:{self.port}")
        uvicorn.run(app, host=self.host, port=self.port, log_level=self.log_level)

    async def start_async(self) -> None:
        """Start server asynchronously (non-blocking).

        Useful for embedding in other applications.
        """
        import uvicorn

        app = self.app or self.create_app()

        config = uvicorn.Config(app, host=self.host, port=self.port, log_level=self.log_level)
        self._server = uvicorn.Server(config)
        await self._server.serve()

    def stop(self) -> None:
        """Stop the server."""
        if self._server:
            self._server.should_exit = True
