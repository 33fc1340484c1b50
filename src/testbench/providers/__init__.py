"""Service providers and package discovery."""

from .base import ServiceProvider, resolve_provider
from .discovery import ENTRY_POINT_GROUP, PackageManifest

__all__ = [
    "ENTRY_POINT_GROUP",
    "PackageManifest",
    "ServiceProvider",
    "resolve_provider",
]
