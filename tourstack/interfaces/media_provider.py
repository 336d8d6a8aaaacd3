"""Abstract base classes for media library and collection persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tourstack.models.media import Collection, Media


# Concrete implementation: SQLiteMediaProvider (tourstack/providers/storage/)
class IMediaProvider(ABC):
    """Contract for media library rows.  Files on disk are the service's concern."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    async def list_media(self) -> list[Media]:
        """All media, newest first."""

    @abstractmethod
    async def get_media(self, media_id: str) -> Media | None:
        """Retrieve a media item by id."""

    @abstractmethod
    async def get_media_by_url(self, url: str) -> Media | None:
        """Retrieve the media item stored at public *url*."""

    @abstractmethod
    async def list_urls(self) -> set[str]:
        """Every stored media URL (used by the upload directory sync)."""

    @abstractmethod
    async def create_media(self, media: Media) -> Media:
        """Persist a new media row."""

    @abstractmethod
    async def update_media(self, media: Media) -> Media:
        """Write every column of *media* and refresh ``updated_at``."""

    @abstractmethod
    async def delete_media(self, media_id: str) -> bool:
        """Delete a media row.  Returns ``True`` if it existed."""


# Concrete implementation: SQLiteCollectionProvider (tourstack/providers/storage/)
class ICollectionProvider(ABC):
    """Contract for curated collections of media items."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    async def list_collections(
        self,
        *,
        collection_type: str | None = None,
        museum_id: str | None = None,
    ) -> list[Collection]:
        """Collections, most recently updated first, optionally filtered."""

    @abstractmethod
    async def get_collection(self, collection_id: str) -> Collection | None:
        """Retrieve a collection by id."""

    @abstractmethod
    async def create_collection(self, collection: Collection) -> Collection:
        """Persist a new collection."""

    @abstractmethod
    async def update_collection(self, collection: Collection) -> Collection:
        """Write every column of *collection* and refresh ``updated_at``."""

    @abstractmethod
    async def delete_collection(self, collection_id: str) -> bool:
        """Delete a collection.  Returns ``True`` if it existed."""
