"""Dependency resolution module for deptree."""

from deptree.resolver.semver import (
    Constraint,
    find_best_match,
    parse_constraint,
    parse_version,
    resolve_version,
)
from deptree.resolver.store import EntryStatus, NodeStore, StoreEntry
from deptree.resolver.engine import JoinBarrier, ResolutionEngine
from deptree.resolver.materializer import TreeMaterializer

__all__ = [
    "Constraint",
    "find_best_match",
    "parse_constraint",
    "parse_version",
    "resolve_version",
    "EntryStatus",
    "NodeStore",
    "StoreEntry",
    "JoinBarrier",
    "ResolutionEngine",
    "TreeMaterializer",
]
