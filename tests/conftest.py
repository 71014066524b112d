"""Pytest configuration and fixtures."""

import asyncio
from collections import Counter
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from deptree.app import create_app
from deptree.config import Settings
from deptree.exceptions import (
    ManifestUnavailableError,
    PackageNotFoundError,
    RegistryUnavailableError,
)
from deptree.registry.base import RegistryGateway


class FakeRegistry(RegistryGateway):
    """In-memory registry that counts every call.

    ``packages`` maps a package name to ``{version: {dep_name: constraint}}``.

    Attributes:
        version_calls: Number of ``fetch_versions`` calls per package.
        manifest_calls: Number of ``fetch_manifest`` calls per (name, version).
        in_flight: Calls currently running.
        max_in_flight: Highest value ``in_flight`` reached.
    """

    name = "fake"

    def __init__(
        self,
        packages: dict[str, dict[str, dict[str, str]]],
        delay: float = 0.0,
        hang: Optional[set[str]] = None,
        unavailable: Optional[set[str]] = None,
        broken_manifests: Optional[set[tuple[str, str]]] = None,
    ) -> None:
        self.packages = packages
        self.delay = delay
        self.hang = hang or set()
        self.unavailable = unavailable or set()
        self.broken_manifests = broken_manifests or set()
        self.version_calls: Counter = Counter()
        self.manifest_calls: Counter = Counter()
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    @property
    def total_calls(self) -> int:
        return sum(self.version_calls.values()) + sum(self.manifest_calls.values())

    async def _enter(self, name: str) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if name in self.hang:
                await asyncio.Event().wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
        finally:
            self.in_flight -= 1

    async def fetch_versions(self, name: str) -> set[str]:
        self.version_calls[name] += 1
        await self._enter(name)
        if name in self.unavailable:
            raise RegistryUnavailableError(f"GET /{name} answered 503")
        if name not in self.packages:
            raise PackageNotFoundError(name)
        return set(self.packages[name])

    async def fetch_manifest(self, name: str, version: str) -> dict[str, str]:
        self.manifest_calls[(name, version)] += 1
        await self._enter(name)
        if (name, version) in self.broken_manifests:
            raise ManifestUnavailableError(name, version, "not found")
        return dict(self.packages[name][version])

    async def close(self) -> None:
        self.closed = True


SIMPLE_PACKAGES = {
    "leaf-pkg": {"1.0.0": {}},
    "root": {
        "1.0.0": {"leaf": "^1.0.0"},
        "1.2.0": {"leaf": "^1.0.0"},
        "2.0.0": {"leaf": "^2.0.0"},
    },
    "leaf": {"1.0.0": {}, "2.0.0": {}},
}

DIAMOND_PACKAGES = {
    "app": {"1.0.0": {"left": "^1.0.0", "right": "^1.0.0"}},
    "left": {"1.0.0": {"shared": "^1.0.0"}},
    "right": {"1.0.0": {"shared": "~1.1.0"}},
    "shared": {"1.0.0": {"leaf": "*"}, "1.1.0": {"leaf": "*"}, "1.1.3": {"leaf": "*"}},
    "leaf": {"1.0.0": {}},
}

CYCLIC_PACKAGES = {
    "a": {"1.0.0": {"b": "^1.0.0"}},
    "b": {"1.0.0": {"a": "^1.0.0"}},
}


@pytest.fixture
def registry() -> FakeRegistry:
    """Fake registry with the simple packages."""
    return FakeRegistry(SIMPLE_PACKAGES)


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings.

    Returns:
        Test settings.
    """
    return Settings(
        host="127.0.0.1",
        port=3000,
        debug=True,
        registry_url="http://registry.test",
        max_concurrency=4,
        registry_timeout=5.0,
        cors_origins=["http://localhost:3000"],
    )


@pytest.fixture
def app(test_settings: Settings, registry: FakeRegistry, monkeypatch):
    """Create test application backed by the fake registry.

    Args:
        test_settings: Test settings.
        registry: Fake registry.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        FastAPI application.
    """
    monkeypatch.setattr("deptree.app.get_settings", lambda: test_settings)
    monkeypatch.setattr("deptree.config.get_settings", lambda: test_settings)
    return create_app(test_settings, gateway=registry)


@pytest.fixture
def client(app) -> TestClient:
    """Create test client with lifespan.

    Args:
        app: FastAPI application.

    Returns:
        Test client.
    """
    # Use context manager to trigger lifespan events
    with TestClient(app) as client:
        yield client
