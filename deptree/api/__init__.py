"""API module for deptree."""

from deptree.api.router import create_router

__all__ = ["create_router"]
