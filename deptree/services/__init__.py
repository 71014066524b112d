"""Services module for deptree."""

from deptree.services.cache import ResponseCache
from deptree.services.tree_service import DependencyTreeService

__all__ = [
    "ResponseCache",
    "DependencyTreeService",
]
