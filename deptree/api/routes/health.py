"""Health check routes."""

from fastapi import APIRouter, Depends, Response

from deptree.api.deps import get_cache, get_engine
from deptree.resolver.engine import ResolutionEngine
from deptree.services.cache import ResponseCache

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status.
    """
    return {"status": "healthy"}


@router.head("/health")
async def health_check_head() -> Response:
    """Health check HEAD endpoint.

    Returns:
        Empty response with 200 status.
    """
    return Response(status_code=200)


@router.get("/ready")
async def readiness_check(
    engine: ResolutionEngine = Depends(get_engine),
    cache: ResponseCache = Depends(get_cache),
) -> dict:
    """Readiness check endpoint.

    Args:
        engine: Resolution engine.
        cache: Response cache.

    Returns:
        Readiness status with engine and cache details.
    """
    return {
        "status": "ready",
        "details": {
            "engine": {
                "registry": engine.gateway.name,
                "max_concurrency": engine.max_concurrency,
                "call_timeout": engine.call_timeout,
                "resolve_timeout": engine.resolve_timeout,
            },
            "cache": cache.stats(),
        },
    }
