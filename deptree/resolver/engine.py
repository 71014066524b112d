"""Concurrent discovery of a package's transitive dependency graph."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Coroutine, Optional, TypeVar

from deptree.exceptions import (
    DeptreeException,
    RegistryUnavailableError,
    ResolutionTimeoutError,
)
from deptree.models.node import DependencyNode, NodeKey, NodeStatus
from deptree.registry.base import RegistryGateway
from deptree.resolver.semver import resolve_version
from deptree.resolver.store import NodeStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JoinBarrier:
    """Tracks every task spawned for one resolution.

    The number of tasks is only known once the graph has been walked, so the
    barrier counts them as they are spawned and releases ``wait`` when the
    last one finishes.

    Attributes:
        spawned: Number of tasks spawned so far.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()
        self._idle = asyncio.Event()
        self._idle.set()
        self.spawned = 0

    def spawn(self, coro: Coroutine[Any, Any, T]) -> "asyncio.Task[T]":
        """Schedule ``coro`` as a task that the barrier waits for."""
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        self._idle.clear()
        self.spawned += 1
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not self._tasks:
            self._idle.set()

    @property
    def outstanding(self) -> int:
        return len(self._tasks)

    async def wait(self) -> None:
        """Block until no spawned task is left running."""
        await self._idle.wait()

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()


@dataclass
class _Resolution:
    """State shared by the tasks of one ``resolve`` call."""

    store: NodeStore = field(default_factory=NodeStore)
    barrier: JoinBarrier = field(default_factory=JoinBarrier)
    versions: dict[str, "asyncio.Future[set[str]]"] = field(default_factory=dict)


class ResolutionEngine:
    """Resolves a package and all of its transitive dependencies.

    Every dependency edge runs as its own task. A task resolves the edge's
    constraint to a concrete version, claims the (name, version) key in the
    node store and, if it is the owner, fetches the manifest and fans out
    one task per dependency. Edges to a key that is already claimed reuse the
    canonical node; edges to a key on the task's own ancestor chain are cut.

    Failures are contained per node: the node records the error and its
    subtree is abandoned, siblings carry on.

    Attributes:
        gateway: Registry gateway.
        call_timeout: Time budget for a single registry call.
        resolve_timeout: Optional time budget for a whole resolution.
    """

    def __init__(
        self,
        gateway: RegistryGateway,
        max_concurrency: int = 32,
        call_timeout: Optional[float] = 30.0,
        resolve_timeout: Optional[float] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            gateway: Registry gateway used for all fetches.
            max_concurrency: Maximum number of registry calls in flight.
            call_timeout: Seconds before a registry call is abandoned.
            resolve_timeout: Seconds before a whole resolution is cancelled.
            log: Logger for diagnostics, defaults to the module logger.
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.gateway = gateway
        self.max_concurrency = max_concurrency
        self.call_timeout = call_timeout
        self.resolve_timeout = resolve_timeout
        self.log = log or logger
        self._slots = asyncio.Semaphore(max_concurrency)

    async def resolve(self, name: str, constraint: str) -> DependencyNode:
        """Discover the full dependency graph of ``name`` at ``constraint``.

        Args:
            name: Root package name.
            constraint: Root version constraint.

        Returns:
            The root node of the working graph. Shared nodes appear under
            several parents and the graph may contain cycles.

        Raises:
            ResolutionTimeoutError: If ``resolve_timeout`` is exceeded.
        """
        run = _Resolution()
        root_task = run.barrier.spawn(self._resolve_edge(run, name, constraint, frozenset()))

        try:
            if self.resolve_timeout is None:
                await run.barrier.wait()
            else:
                await asyncio.wait_for(run.barrier.wait(), self.resolve_timeout)
        except asyncio.TimeoutError as e:
            run.barrier.cancel_all()
            await run.barrier.wait()
            self.log.error(
                "Resolution of %s@%s timed out after %ss",
                name, constraint, self.resolve_timeout,
                extra={"package": name, "constraint": constraint},
            )
            raise ResolutionTimeoutError(name, constraint, self.resolve_timeout) from e

        self.log.debug(
            "Resolved %s@%s with %d tasks, %d distinct packages",
            name, constraint, run.barrier.spawned, len(run.store),
            extra={"package": name, "constraint": constraint, "store": run.store.stats()},
        )
        return root_task.result()

    async def _call(self, fetch: Callable[..., Awaitable[T]], *args: str) -> T:
        """Run one registry call under the concurrency gate and time budget."""
        async with self._slots:
            try:
                if self.call_timeout is None:
                    return await fetch(*args)
                return await asyncio.wait_for(fetch(*args), self.call_timeout)
            except asyncio.TimeoutError as e:
                raise RegistryUnavailableError(
                    f"{getattr(fetch, '__name__', 'call')}({', '.join(args)}) "
                    f"timed out after {self.call_timeout}s"
                ) from e

    def _available_versions(self, run: _Resolution, name: str) -> "asyncio.Future[set[str]]":
        """Versions of ``name``, fetched at most once per resolution."""
        future = run.versions.get(name)
        if future is None:
            future = asyncio.ensure_future(self._call(self.gateway.fetch_versions, name))
            run.versions[name] = future
        return future

    def _fail(self, node: DependencyNode, exc: DeptreeException) -> DependencyNode:
        node.fail(exc.kind, exc.message)
        self.log.warning(
            "Could not resolve %s@%s: %s",
            node.name, node.resolved_version or node.constraint, exc.message,
            extra={
                "package": node.name,
                "constraint": node.constraint,
                "version": node.resolved_version,
                "error_kind": exc.kind,
            },
        )
        return node

    async def _resolve_edge(
        self,
        run: _Resolution,
        name: str,
        constraint: str,
        ancestors: frozenset[NodeKey],
    ) -> DependencyNode:
        """Resolve one dependency edge and, if this task owns it, expand it."""
        self.log.debug(
            "Starting task %d (%d outstanding) for %s@%s",
            run.barrier.spawned, run.barrier.outstanding, name, constraint,
        )
        node = DependencyNode(name=name, constraint=constraint)

        try:
            versions = await self._available_versions(run, name)
            node.resolve_to(resolve_version(constraint, versions, package_name=name))
        except DeptreeException as exc:
            return self._fail(node, exc)

        key = node.key
        if key in ancestors:
            node.status = NodeStatus.CUT
            self.log.debug("Cut cyclic edge to %s", key, extra={"package": name, "version": key.version})
            return node

        entry, created = await run.store.get_or_create(key, node)
        if not created:
            self.log.debug("Found duplicate: %s", key, extra={"package": name, "version": key.version})
            return entry.node

        node.status = NodeStatus.RESOLVING
        try:
            manifest = await self._call(self.gateway.fetch_manifest, name, key.version)
        except DeptreeException as exc:
            self._fail(node, exc)
            await run.store.mark_failed(key, exc.message)
            return node

        lineage = ancestors | {key}
        children = [
            (dep_name, run.barrier.spawn(self._resolve_edge(run, dep_name, dep_constraint, lineage)))
            for dep_name, dep_constraint in manifest.items()
        ]
        if children:
            await asyncio.gather(*(task for _, task in children))
        for dep_name, task in children:
            node.children[dep_name] = task.result()

        node.status = NodeStatus.EXPANDED
        await run.store.mark_resolved(key, node)
        self.log.debug("Scanned package %s", key, extra={"package": name, "version": key.version})
        return node
