"""Collections of gallery images, documents and audio clips.

Image items that carry AI analysis (``aiMetadata`` / ``aiTranslations``)
and point at a local upload have that analysis copied onto the matching
media row after every create or update, so the media library shows the
same captions the collection editor produced.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import structlog

from tourstack.interfaces.media_provider import ICollectionProvider, IMediaProvider
from tourstack.models.media import Collection
from tourstack.utils.errors import NotFoundError, ValidationError
from tourstack.utils.slugs import generate_item_id

logger = structlog.get_logger(logger_name=__name__)

_PROTECTED_FIELDS = ("id", "created_at", "updated_at")


class CollectionService:
    def __init__(self, store: ICollectionProvider, media_store: IMediaProvider) -> None:
        self._store = store
        self._media_store = media_store

    async def list_collections(
        self,
        collection_type: str | None = None,
        museum_id: str | None = None,
    ) -> list[Collection]:
        return await self._store.list_collections(
            collection_type=collection_type, museum_id=museum_id
        )

    async def get_collection(self, collection_id: str) -> Collection:
        collection = await self._store.get_collection(collection_id)
        if collection is None:
            raise NotFoundError(message="Collection not found")
        return collection

    async def create_collection(self, data: dict[str, Any]) -> Collection:
        if not data.get("name"):
            raise ValidationError(message="Name is required")
        fields = {k: v for k, v in data.items() if v is not None and k not in _PROTECTED_FIELDS}
        collection = Collection.model_validate({"id": str(uuid4()), **fields})
        created = await self._store.create_collection(collection)
        if created.items:
            await self.sync_media_metadata(created.items)
        return created

    async def update_collection(self, collection_id: str, updates: dict[str, Any]) -> Collection:
        collection = await self.get_collection(collection_id)
        changes = {k: v for k, v in updates.items() if k not in _PROTECTED_FIELDS}
        updated = await self._store.update_collection(collection.merged(changes))
        if changes.get("items"):
            await self.sync_media_metadata(updated.items)
        return updated

    async def delete_collection(self, collection_id: str) -> None:
        if not await self._store.delete_collection(collection_id):
            raise NotFoundError(message="Collection not found")
        logger.info("collection_deleted", collection_id=collection_id)

    async def add_item(self, collection_id: str, item: dict[str, Any]) -> Collection:
        collection = await self.get_collection(collection_id)
        new_item = dict(item)
        new_item.setdefault("id", generate_item_id("item"))
        if new_item.get("order") is None:
            new_item["order"] = len(collection.items)
        return await self._store.update_collection(
            collection.model_copy(update={"items": [*collection.items, new_item]})
        )

    async def remove_item(self, collection_id: str, item_id: str) -> Collection:
        """Drop an item and renumber the remaining ones 0..n-1."""
        collection = await self.get_collection(collection_id)
        remaining = [
            {**item, "order": index}
            for index, item in enumerate(i for i in collection.items if i.get("id") != item_id)
        ]
        return await self._store.update_collection(
            collection.model_copy(update={"items": remaining})
        )

    async def sync_media_metadata(self, items: list[dict[str, Any]]) -> dict[str, int]:
        """Copy AI metadata from image items onto their media rows."""
        synced = not_found = 0
        for item in items:
            url = item.get("url") or ""
            if item.get("type") != "image" or not url.startswith("/uploads/"):
                continue
            if not (item.get("aiMetadata") or item.get("aiTranslations")):
                continue
            media = await self._media_store.get_media_by_url(url)
            if media is None:
                not_found += 1
                continue
            changes: dict[str, Any] = {}
            if item.get("aiMetadata"):
                changes["ai_metadata"] = item["aiMetadata"]
            if item.get("aiTranslations"):
                changes["ai_translations"] = item["aiTranslations"]
            await self._media_store.update_media(media.model_copy(update=changes))
            synced += 1
        if synced or not_found:
            logger.info("collection_media_synced", synced=synced, not_found=not_found)
        return {"synced": synced, "notFound": not_found}
