"""Main API router configuration."""

from fastapi import APIRouter

from deptree.api.routes import cache, health, package


def create_router() -> APIRouter:
    """Create the main API router with all routes.

    Returns:
        Configured APIRouter.
    """
    router = APIRouter()

    # Health check routes
    router.include_router(
        health.router,
        tags=["health"],
    )

    # Dependency tree routes
    router.include_router(
        package.router,
        prefix="/package",
        tags=["package"],
    )

    # Cache routes
    router.include_router(
        cache.router,
        prefix="/cache",
        tags=["cache"],
    )

    return router
