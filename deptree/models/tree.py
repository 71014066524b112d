"""Pydantic models for the materialized dependency tree."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ResolutionErrorInfo(BaseModel):
    """Failure details attached to a tree node.

    Attributes:
        kind: Error kind, e.g. "NoCompatibleVersion".
        message: Human-readable error message.
    """

    kind: str
    message: str


class PackageTree(BaseModel):
    """One node of the serialized dependency tree.

    Attributes:
        name: Package name.
        version: Resolved version, or the requested constraint if resolution failed.
        dependencies: Child trees keyed by synthetic identifiers.
        resolution_error: Present only on nodes that failed to resolve.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    version: str
    dependencies: dict[str, "PackageTree"] = Field(default_factory=dict)
    resolution_error: Optional[ResolutionErrorInfo] = Field(
        default=None,
        alias="resolutionError",
    )

    def iter_nodes(self):
        """Yield this node and every descendant, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.dependencies.values())))

    @property
    def has_errors(self) -> bool:
        """Whether any node of the tree carries a resolution error."""
        return any(node.resolution_error is not None for node in self.iter_nodes())

    def to_json_bytes(self) -> bytes:
        """Serialize the tree as indented JSON, omitting absent errors."""
        return self.model_dump_json(
            by_alias=True,
            exclude_none=True,
            indent=2,
        ).encode("utf-8")


PackageTree.model_rebuild()
