"""API routes for deptree."""

from deptree.api.routes import cache, health, package

__all__ = ["cache", "health", "package"]
