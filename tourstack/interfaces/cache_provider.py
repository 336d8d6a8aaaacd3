"""Abstract base class for cache service providers.

Key-value caching for slow, rarely-changing upstream answers such as the
translation language lists.  Implementations may use an in-memory dict,
Redis, or any other backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async to allow for network-backed stores.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* for the cache's configured TTL."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*; a no-op if the key does not exist."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
