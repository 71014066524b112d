"""Dependency tree service: the request pipeline behind the package route."""

import logging
import time

from pydantic import ValidationError

from deptree.exceptions import InvalidRequestError, SerializationError
from deptree.resolver.engine import ResolutionEngine
from deptree.resolver.materializer import TreeMaterializer
from deptree.services.cache import ResponseCache

logger = logging.getLogger(__name__)


class DependencyTreeService:
    """Service for dependency tree requests.

    Validates the request, answers from the response cache when it can and
    otherwise resolves, materializes and serializes the tree.

    Attributes:
        engine: Resolution engine.
        materializer: Tree materializer.
        cache: Response cache.
    """

    def __init__(
        self,
        engine: ResolutionEngine,
        materializer: TreeMaterializer,
        cache: ResponseCache,
    ) -> None:
        """Initialize the service.

        Args:
            engine: Resolution engine.
            materializer: Tree materializer.
            cache: Response cache.
        """
        self.engine = engine
        self.materializer = materializer
        self.cache = cache

    async def get_tree(self, name: str, constraint: str) -> bytes:
        """Get the serialized dependency tree of a package.

        Args:
            name: Package name, may be scoped ("@scope/pkg").
            constraint: Version constraint as given by the caller.

        Returns:
            JSON document of the tree, UTF-8 encoded.

        Raises:
            InvalidRequestError: If the name or the constraint is empty.
            ResolutionTimeoutError: If the resolution budget is exceeded.
            SerializationError: If the tree cannot be serialized.
        """
        if not name or not name.strip():
            raise InvalidRequestError("Package name is required")
        if not constraint or not constraint.strip():
            raise InvalidRequestError("Package version is required")

        start = time.perf_counter()
        key = (name, constraint)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info(
                "Cache hit for %s@%s", name, constraint,
                extra={"package": name, "constraint": constraint},
            )
            return cached

        root = await self.engine.resolve(name, constraint)
        tree = self.materializer.materialize(root)

        try:
            payload = tree.to_json_bytes()
        except (ValidationError, TypeError, ValueError) as e:
            raise SerializationError(str(e)) from e

        if tree.has_errors:
            logger.warning(
                "Tree of %s@%s contains unresolved packages", name, constraint,
                extra={"package": name, "constraint": constraint},
            )
        self.cache.put(key, payload)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Request for %s@%s completed in %.1fms", name, constraint, elapsed_ms,
            extra={"package": name, "constraint": constraint, "elapsed_ms": round(elapsed_ms, 1)},
        )
        return payload
