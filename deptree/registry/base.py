"""Abstract base class for package registry gateways."""

from abc import ABC, abstractmethod


class RegistryGateway(ABC):
    """Read-only access to a package registry.

    Implementations must be safe to call concurrently from many resolution
    tasks; no ordering is guaranteed between calls.

    Attributes:
        name: Unique name for this gateway.
    """

    name: str = "base"

    @abstractmethod
    async def fetch_versions(self, name: str) -> set[str]:
        """Fetch every published version of a package.

        Args:
            name: Package name.

        Returns:
            Set of version strings.

        Raises:
            PackageNotFoundError: If the registry does not know the package.
            RegistryUnavailableError: If the registry cannot be reached.
        """
        ...

    @abstractmethod
    async def fetch_manifest(self, name: str, version: str) -> dict[str, str]:
        """Fetch the direct dependencies of one concrete version.

        Args:
            name: Package name.
            version: Concrete version.

        Returns:
            Mapping of dependency name to version constraint.

        Raises:
            ManifestUnavailableError: If the manifest is missing or malformed.
            RegistryUnavailableError: If the registry cannot be reached.
        """
        ...

    async def close(self) -> None:
        """Release held resources."""
        return None
