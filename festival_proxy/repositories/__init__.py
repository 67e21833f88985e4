"""Read-only data access.

This package contains repositories for the static data the proxy serves.
"""

from festival_proxy.repositories.festival_registry import FestivalRegistryRepository

__all__ = ["FestivalRegistryRepository"]
