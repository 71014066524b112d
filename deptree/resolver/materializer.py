"""Conversion of the resolved dependency graph into a serializable tree."""

import logging
import uuid
from typing import Optional

from deptree.models.node import DependencyNode, NodeKey
from deptree.models.tree import PackageTree, ResolutionErrorInfo

logger = logging.getLogger(__name__)

# Namespace for child identifiers; any fixed UUID works
TREE_NAMESPACE = uuid.UUID("5b0e2c4e-3f7a-4d8e-9a51-6f2d1c0b7e93")


class TreeMaterializer:
    """Renders a working graph as a strict tree.

    Runs single-threaded, after every resolution task has joined. The walk
    is depth first; the first time a (name, version) pair is reached it is
    emitted with its dependencies, every later occurrence is emitted as a
    leaf. Cut and failed nodes are always leaves, so the output is finite
    even when the graph has cycles.

    Children are keyed by UUIDv5 identifiers derived from the parent's
    identifier and the child's position. Two edges to the same package never
    overwrite each other, and identifiers are stable across runs over the
    same graph.
    """

    def __init__(self, namespace: uuid.UUID = TREE_NAMESPACE) -> None:
        self.namespace = namespace

    def materialize(self, root: DependencyNode) -> PackageTree:
        """Build the output tree for ``root``.

        Args:
            root: Root of the working graph.

        Returns:
            PackageTree without shared substructure or cycles.
        """
        emitted: set[NodeKey] = set()
        root_id = str(uuid.uuid5(self.namespace, root.name))
        tree = self._emit(root, root_id, emitted)
        logger.debug(
            "Materialized tree of %s@%s with %d expanded packages",
            root.name, root.resolved_version or root.constraint, len(emitted),
            extra={"package": root.name, "version": root.resolved_version},
        )
        return tree

    def _child_id(self, parent_id: str, index: int) -> str:
        return str(uuid.uuid5(self.namespace, f"{parent_id}/{index}"))

    def _emit(self, node: DependencyNode, node_id: str, emitted: set[NodeKey]) -> PackageTree:
        error: Optional[ResolutionErrorInfo] = None
        if node.error is not None:
            error = ResolutionErrorInfo(kind=node.error.kind, message=node.error.message)

        tree = PackageTree(
            name=node.name,
            version=node.resolved_version or node.constraint,
            resolution_error=error,
        )

        key = node.key
        if node.is_leaf or key is None or key in emitted:
            return tree
        emitted.add(key)

        for index, child in enumerate(node.children.values()):
            child_id = self._child_id(node_id, index)
            tree.dependencies[child_id] = self._emit(child, child_id, emitted)
        return tree
