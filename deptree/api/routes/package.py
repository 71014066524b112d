"""Dependency tree routes."""

from fastapi import APIRouter, Depends, Response

from deptree.api.deps import get_tree_service
from deptree.services.tree_service import DependencyTreeService

router = APIRouter()


@router.get("/{name:path}/{version}")
async def get_package_tree(
    name: str,
    version: str,
    service: DependencyTreeService = Depends(get_tree_service),
) -> Response:
    """Get the transitive dependency tree of a package.

    Scoped names keep their slash, e.g. ``/package/@scope/pkg/^1.0.0``.

    Args:
        name: Package name.
        version: Version constraint.
        service: Dependency tree service.

    Returns:
        The tree as indented JSON.
    """
    content = await service.get_tree(name, version)
    return Response(content=content, media_type="application/json")
