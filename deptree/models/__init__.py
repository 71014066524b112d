"""Data models for deptree."""

from deptree.models.node import (
    DependencyNode,
    NodeKey,
    NodeStatus,
    ResolutionFailure,
)
from deptree.models.tree import PackageTree, ResolutionErrorInfo

__all__ = [
    # Working graph
    "DependencyNode",
    "NodeKey",
    "NodeStatus",
    "ResolutionFailure",
    # Materialized tree
    "PackageTree",
    "ResolutionErrorInfo",
]
