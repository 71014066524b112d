"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from deptree.resolver.engine import ResolutionEngine
from deptree.services.cache import ResponseCache
from deptree.services.tree_service import DependencyTreeService


async def get_tree_service(request: Request) -> DependencyTreeService:
    """Get the dependency tree service from application state.

    Args:
        request: FastAPI request.

    Returns:
        Dependency tree service.
    """
    return request.app.state.tree_service


async def get_cache(request: Request) -> ResponseCache:
    """Get the response cache from application state.

    Args:
        request: FastAPI request.

    Returns:
        Response cache.
    """
    return request.app.state.cache


async def get_engine(request: Request) -> ResolutionEngine:
    """Get the resolution engine from application state.

    Args:
        request: FastAPI request.

    Returns:
        Resolution engine.
    """
    return request.app.state.engine
