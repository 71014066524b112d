"""
npm Registry Client
Async HTTP gateway for npm-compatible registries.

Provides:
- Package metadata (published versions) via the abbreviated packument
- Version manifests (direct dependencies)
- Error mapping to deptree exceptions
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from deptree.exceptions import (
    ManifestUnavailableError,
    PackageNotFoundError,
    RegistryUnavailableError,
)
from deptree.registry.base import RegistryGateway

# Abbreviated metadata is a fraction of the full document
ABBREVIATED_ACCEPT = (
    "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8, */*"
)


def encode_package_name(name: str) -> str:
    """Encode a package name for use as a URL path segment.

    Scoped names keep their "@" but escape the slash: "@scope/pkg" becomes
    "@scope%2Fpkg".
    """
    return quote(name, safe="@")


class NpmRegistryClient(RegistryGateway):
    """
    Async client for an npm-compatible registry.

    One ``httpx.AsyncClient`` (and its connection pool) is shared by all
    concurrent resolution tasks.
    """

    name = "npm"

    def __init__(
        self,
        registry_url: str = "https://registry.npmjs.org",
        timeout: float = 30.0,
        retries: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the registry client.

        Args:
            registry_url: Base URL of the registry
            timeout: Request timeout in seconds
            retries: Connection retries (ignored when a transport is given)
            transport: Optional transport override, e.g. httpx.MockTransport
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self.retries = retries
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logging.getLogger(__name__)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            transport = self._transport or httpx.AsyncHTTPTransport(retries=self.retries)
            self._client = httpx.AsyncClient(
                base_url=self.registry_url,
                timeout=httpx.Timeout(self.timeout),
                transport=transport,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NpmRegistryClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def _get_json(self, path: str, headers: Optional[dict[str, str]] = None) -> tuple[int, Any]:
        """
        GET a registry document.

        Returns:
            (status_code, decoded JSON or None for non-200 responses)

        Raises:
            RegistryUnavailableError: On transport errors, timeouts or bad JSON
        """
        url = f"{self.registry_url}{path}"
        try:
            response = await self._get_client().get(path, headers=headers)
        except httpx.RequestError as e:
            raise RegistryUnavailableError(f"GET {url} failed: {e!r}", url=url) from e

        if response.status_code != 200:
            return response.status_code, None

        try:
            return 200, response.json()
        except ValueError as e:
            raise RegistryUnavailableError(f"GET {url} returned invalid JSON", url=url) from e

    # =================== Gateway ===================

    async def fetch_versions(self, name: str) -> set[str]:
        """
        Get all published versions of a package.

        Args:
            name: Package name

        Returns:
            Set of version strings
        """
        path = f"/{encode_package_name(name)}"
        status, data = await self._get_json(path, headers={"Accept": ABBREVIATED_ACCEPT})

        if status == 404:
            raise PackageNotFoundError(name)
        if status != 200:
            raise RegistryUnavailableError(
                f"GET {path} answered {status}",
                url=f"{self.registry_url}{path}",
            )

        versions = data.get("versions") if isinstance(data, dict) else None
        if not isinstance(versions, dict):
            raise RegistryUnavailableError(
                f"metadata of '{name}' has no versions map",
                url=f"{self.registry_url}{path}",
            )

        self.logger.debug("Fetched %d versions of %s", len(versions), name)
        return set(versions)

    async def fetch_manifest(self, name: str, version: str) -> dict[str, str]:
        """
        Get the direct dependencies of a concrete version.

        Args:
            name: Package name
            version: Version string

        Returns:
            Mapping of dependency name to constraint
        """
        path = f"/{encode_package_name(name)}/{quote(version, safe='')}"
        status, data = await self._get_json(path)

        if status == 404:
            raise ManifestUnavailableError(name, version, "not found")
        if status != 200:
            raise RegistryUnavailableError(
                f"GET {path} answered {status}",
                url=f"{self.registry_url}{path}",
            )
        if not isinstance(data, dict):
            raise ManifestUnavailableError(name, version, "manifest is not an object")

        dependencies = data.get("dependencies") or {}
        if not isinstance(dependencies, dict):
            raise ManifestUnavailableError(name, version, "dependencies is not an object")

        return {
            str(dep_name): constraint if isinstance(constraint, str) else str(constraint)
            for dep_name, constraint in dependencies.items()
        }
