"""Registry gateways for deptree."""

from deptree.registry.base import RegistryGateway
from deptree.registry.npm import NpmRegistryClient, encode_package_name

__all__ = [
    "RegistryGateway",
    "NpmRegistryClient",
    "encode_package_name",
]
