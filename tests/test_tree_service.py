"""Tests for the dependency tree service."""

import json
import logging
from unittest.mock import MagicMock

import pytest

from conftest import DIAMOND_PACKAGES, SIMPLE_PACKAGES, FakeRegistry
from deptree.exceptions import InvalidRequestError, SerializationError
from deptree.resolver.engine import ResolutionEngine
from deptree.resolver.materializer import TreeMaterializer
from deptree.services.cache import ResponseCache
from deptree.services.tree_service import DependencyTreeService


def _service(registry: FakeRegistry, cache: ResponseCache | None = None) -> DependencyTreeService:
    return DependencyTreeService(
        ResolutionEngine(registry),
        TreeMaterializer(),
        cache if cache is not None else ResponseCache(),
    )


class TestDependencyTreeService:
    """Tests for DependencyTreeService."""

    @pytest.mark.asyncio
    async def test_leaf_package(self) -> None:
        """Test the leaf scenario end to end."""
        service = _service(FakeRegistry(SIMPLE_PACKAGES))

        payload = await service.get_tree("leaf-pkg", "1.0.0")

        assert json.loads(payload) == {"name": "leaf-pkg", "version": "1.0.0", "dependencies": {}}

    @pytest.mark.asyncio
    async def test_second_request_is_served_from_cache(self, caplog) -> None:
        """Test identical requests are byte identical, the second without fetches."""
        registry = FakeRegistry(DIAMOND_PACKAGES)
        service = _service(registry)
        caplog.set_level(logging.INFO, logger="deptree.services.tree_service")

        first = await service.get_tree("app", "1.0.0")
        calls = registry.total_calls
        second = await service.get_tree("app", "1.0.0")

        assert first == second
        assert registry.total_calls == calls
        assert any("Cache hit" in message for message in caplog.messages)
        assert any("completed in" in message for message in caplog.messages)

    @pytest.mark.asyncio
    async def test_trees_with_errors_are_cached(self, caplog) -> None:
        """Test a tree with unresolved packages is served from cache the second time."""
        packages = dict(SIMPLE_PACKAGES)
        packages["app"] = {"1.0.0": {"leaf": "^1.0.0", "gitdep": "github:user/repo"}}
        packages["gitdep"] = {"1.0.0": {}}
        registry = FakeRegistry(packages)
        cache = ResponseCache()
        service = _service(registry, cache)
        caplog.set_level(logging.WARNING, logger="deptree.services.tree_service")

        first = await service.get_tree("app", "^1.0.0")
        calls = registry.total_calls
        second = await service.get_tree("app", "^1.0.0")

        assert first == second
        assert registry.total_calls == calls
        assert len(cache) == 1
        kinds = {
            dep["name"]: dep.get("resolutionError", {}).get("kind")
            for dep in json.loads(first)["dependencies"].values()
        }
        assert kinds == {"leaf": None, "gitdep": "InvalidConstraint"}
        assert any("unresolved packages" in message for message in caplog.messages)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,constraint", [("", "1.0.0"), ("pkg", ""), ("   ", "1.0.0")])
    async def test_rejects_empty_parameters(self, name: str, constraint: str) -> None:
        """Test empty names and versions are rejected before any fetch."""
        registry = FakeRegistry(SIMPLE_PACKAGES)
        service = _service(registry)

        with pytest.raises(InvalidRequestError) as exc_info:
            await service.get_tree(name, constraint)

        assert exc_info.value.status_code == 400
        assert registry.total_calls == 0

    @pytest.mark.asyncio
    async def test_serialization_failure(self) -> None:
        """Test serialization errors surface as SerializationError."""
        materializer = MagicMock()
        materializer.materialize.return_value.to_json_bytes.side_effect = ValueError("bad tree")
        service = DependencyTreeService(
            ResolutionEngine(FakeRegistry(SIMPLE_PACKAGES)),
            materializer,
            ResponseCache(),
        )

        with pytest.raises(SerializationError) as exc_info:
            await service.get_tree("leaf-pkg", "1.0.0")

        assert exc_info.value.status_code == 500
        assert "bad tree" in exc_info.value.message
