"""Working-graph data models used during resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional


class NodeStatus(str, Enum):
    """Resolution state of a dependency node."""

    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    EXPANDED = "expanded"
    FAILED = "failed"
    CUT = "cut"


class NodeKey(NamedTuple):
    """Identity of a resolved package: name plus concrete version."""

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class ResolutionFailure:
    """Why a node could not be resolved or expanded.

    Attributes:
        kind: Error kind, e.g. "NoCompatibleVersion".
        message: Human-readable error message.
    """

    kind: str
    message: str


@dataclass(eq=False)
class DependencyNode:
    """One package at one point of the dependency graph.

    A node reached through several parents is a single object shared by all of
    them; only the task that owns its resolution writes ``resolved_version``
    and ``children``.

    Attributes:
        name: Package name.
        constraint: Version range requested by the parent edge.
        resolved_version: Concrete version, None until resolved.
        children: Child nodes keyed by dependency name.
        status: Resolution state.
        error: Failure details when status is FAILED.
    """

    name: str
    constraint: str = ""
    resolved_version: Optional[str] = None
    children: dict[str, "DependencyNode"] = field(default_factory=dict)
    status: NodeStatus = NodeStatus.UNRESOLVED
    error: Optional[ResolutionFailure] = None

    @property
    def key(self) -> Optional[NodeKey]:
        """Store key of the node, None before the version is resolved."""
        if self.resolved_version is None:
            return None
        return NodeKey(self.name, self.resolved_version)

    @property
    def is_leaf(self) -> bool:
        """Whether materialization must not descend into this node."""
        return self.status in (NodeStatus.FAILED, NodeStatus.CUT) or not self.children

    def resolve_to(self, version: str) -> None:
        """Pin the node to a concrete version.

        Raises:
            ValueError: If the node is already pinned to a different version.
        """
        if self.resolved_version is not None and self.resolved_version != version:
            raise ValueError(
                f"{self.name} already resolved to {self.resolved_version}, "
                f"refusing {version}"
            )
        self.resolved_version = version

    def fail(self, kind: str, message: str) -> None:
        """Mark the node failed; its subtree is abandoned."""
        self.status = NodeStatus.FAILED
        self.error = ResolutionFailure(kind=kind, message=message)
        self.children.clear()
