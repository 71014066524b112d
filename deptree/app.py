"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import create_router
from .config import Settings, get_settings
from .exceptions import DeptreeException
from .registry.base import RegistryGateway
from .registry.npm import NpmRegistryClient
from .resolver.engine import ResolutionEngine
from .resolver.materializer import TreeMaterializer
from .services.cache import ResponseCache
from .services.tree_service import DependencyTreeService

logger = logging.getLogger(__name__)


def create_lifespan(settings: Settings, gateway: Optional[RegistryGateway] = None):
    """Create a lifespan context manager.

    Args:
        settings: Application settings.
        gateway: Optional registry gateway override (for tests).

    Returns:
        Lifespan context manager.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager.

        Builds the registry gateway, engine, cache and tree service on
        startup and closes the gateway on shutdown.

        Args:
            app: FastAPI application.

        Yields:
            None.
        """
        registry = gateway or NpmRegistryClient(
            registry_url=settings.registry_url,
            timeout=settings.registry_timeout,
            retries=settings.registry_retries,
        )
        engine = ResolutionEngine(
            registry,
            max_concurrency=settings.max_concurrency,
            call_timeout=settings.registry_timeout,
            resolve_timeout=settings.resolve_timeout,
            log=logging.getLogger("deptree.resolver"),
        )
        cache = ResponseCache(
            max_entries=settings.cache_max_entries,
            ttl_seconds=settings.cache_ttl_seconds,
        )

        app.state.registry = registry
        app.state.engine = engine
        app.state.cache = cache
        app.state.tree_service = DependencyTreeService(engine, TreeMaterializer(), cache)

        logger.info(
            "deptree started (registry=%s, max_concurrency=%d)",
            settings.registry_url, settings.max_concurrency,
        )

        yield

        # Cleanup
        await registry.close()
        logger.info("deptree stopped")

    return lifespan


def create_app(
    settings: Settings | None = None,
    gateway: Optional[RegistryGateway] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override.
        gateway: Optional registry gateway override (for tests).

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="deptree",
        description="Transitive dependency trees for npm packages",
        version=__version__,
        lifespan=create_lifespan(settings, gateway=gateway),
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add exception handlers
    @app.exception_handler(DeptreeException)
    async def deptree_error_handler(
        request: Request,
        exc: DeptreeException,
    ) -> JSONResponse:
        """Handle deptree errors.

        Args:
            request: FastAPI request.
            exc: Deptree error.

        Returns:
            JSON error response.
        """
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
        )

    # Include API router
    router = create_router()
    app.include_router(router, prefix="/api/v1")

    return app


# Create default application instance
app = create_app()
