"""Tests for the npm registry client."""

import httpx
import pytest

from deptree.exceptions import (
    ManifestUnavailableError,
    PackageNotFoundError,
    RegistryUnavailableError,
)
from deptree.registry.npm import ABBREVIATED_ACCEPT, NpmRegistryClient, encode_package_name


def _client(handler) -> NpmRegistryClient:
    return NpmRegistryClient(
        registry_url="http://registry.test/",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


def test_encode_package_name() -> None:
    """Test scoped names keep "@" and escape the slash."""
    assert encode_package_name("left-pad") == "left-pad"
    assert encode_package_name("@types/node") == "@types%2Fnode"


class TestNpmRegistryClient:
    """Tests for NpmRegistryClient."""

    @pytest.mark.asyncio
    async def test_fetch_versions(self) -> None:
        """Test versions are read from the abbreviated packument."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.raw_path
            seen["accept"] = request.headers.get("accept")
            return httpx.Response(
                200,
                json={"name": "left-pad", "versions": {"1.0.0": {}, "1.3.0": {}}},
            )

        async with _client(handler) as client:
            versions = await client.fetch_versions("left-pad")

        assert versions == {"1.0.0", "1.3.0"}
        assert seen["path"] == b"/left-pad"
        assert seen["accept"] == ABBREVIATED_ACCEPT

    @pytest.mark.asyncio
    async def test_fetch_versions_scoped(self) -> None:
        """Test scoped packages are requested with an encoded slash."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.raw_path
            return httpx.Response(200, json={"versions": {"20.1.0": {}}})

        async with _client(handler) as client:
            assert await client.fetch_versions("@types/node") == {"20.1.0"}

        assert seen["path"] == b"/@types%2Fnode"

    @pytest.mark.asyncio
    async def test_fetch_versions_not_found(self) -> None:
        """Test 404 maps to PackageNotFoundError."""
        async with _client(lambda request: httpx.Response(404, json={"error": "Not found"})) as client:
            with pytest.raises(PackageNotFoundError):
                await client.fetch_versions("ghost")

    @pytest.mark.asyncio
    async def test_fetch_versions_server_error(self) -> None:
        """Test other error statuses map to RegistryUnavailableError."""
        async with _client(lambda request: httpx.Response(503)) as client:
            with pytest.raises(RegistryUnavailableError) as exc_info:
                await client.fetch_versions("left-pad")

        assert exc_info.value.status_code == 502
        assert "503" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_fetch_versions_invalid_json(self) -> None:
        """Test unparseable bodies map to RegistryUnavailableError."""
        async with _client(lambda request: httpx.Response(200, content=b"<html>")) as client:
            with pytest.raises(RegistryUnavailableError):
                await client.fetch_versions("left-pad")

    @pytest.mark.asyncio
    async def test_fetch_versions_missing_versions(self) -> None:
        """Test metadata without a versions map is rejected."""
        async with _client(lambda request: httpx.Response(200, json={"name": "x"})) as client:
            with pytest.raises(RegistryUnavailableError):
                await client.fetch_versions("x")

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        """Test transport errors map to RegistryUnavailableError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(RegistryUnavailableError) as exc_info:
                await client.fetch_versions("left-pad")

        assert exc_info.value.url == "http://registry.test/left-pad"

    @pytest.mark.asyncio
    async def test_fetch_manifest(self) -> None:
        """Test the dependencies of a concrete version are returned."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.raw_path
            return httpx.Response(
                200,
                json={
                    "name": "express",
                    "version": "4.18.2",
                    "dependencies": {"accepts": "~1.3.8", "debug": "2.6.9"},
                },
            )

        async with _client(handler) as client:
            manifest = await client.fetch_manifest("express", "4.18.2")

        assert manifest == {"accepts": "~1.3.8", "debug": "2.6.9"}
        assert seen["path"] == b"/express/4.18.2"

    @pytest.mark.asyncio
    async def test_fetch_manifest_without_dependencies(self) -> None:
        """Test manifests without dependencies yield an empty mapping."""
        async with _client(lambda request: httpx.Response(200, json={"version": "1.0.0"})) as client:
            assert await client.fetch_manifest("leaf", "1.0.0") == {}

    @pytest.mark.asyncio
    async def test_fetch_manifest_not_found(self) -> None:
        """Test a missing version maps to ManifestUnavailableError."""
        async with _client(lambda request: httpx.Response(404)) as client:
            with pytest.raises(ManifestUnavailableError) as exc_info:
                await client.fetch_manifest("leaf", "9.9.9")

        assert exc_info.value.version == "9.9.9"

    @pytest.mark.asyncio
    async def test_fetch_manifest_malformed_dependencies(self) -> None:
        """Test a dependencies field that is not an object is rejected."""
        async with _client(
            lambda request: httpx.Response(200, json={"dependencies": ["a", "b"]})
        ) as client:
            with pytest.raises(ManifestUnavailableError):
                await client.fetch_manifest("odd", "1.0.0")

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        """Test closing twice is harmless."""
        client = _client(lambda request: httpx.Response(200, json={"versions": {}}))
        await client.fetch_versions("x")
        await client.close()
        await client.close()
