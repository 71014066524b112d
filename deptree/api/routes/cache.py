"""Response cache routes."""

import logging

from fastapi import APIRouter, Depends

from deptree.api.deps import get_cache
from deptree.services.cache import ResponseCache

logger = logging.getLogger(__name__)

router = APIRouter()


@router.delete("")
async def clear_cache(cache: ResponseCache = Depends(get_cache)) -> dict:
    """Drop every cached response.

    Args:
        cache: Response cache.

    Returns:
        Number of removed entries.
    """
    removed = cache.clear()
    logger.info("Cleared %d cached responses", removed)
    return {"cleared": removed}
