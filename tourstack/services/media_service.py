"""Media library: uploads on disk plus their rows in the ``media`` table.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services.
# Depends on: IMediaProvider (rows), ITourProvider (usage lookups),
#             the local ``uploads/`` directory, Pillow.
#
# Files land in one of three folders chosen by MIME prefix:
#
#   image/*  -> uploads/images/<uuid4><ext>
#   audio/*  -> uploads/audio/<uuid4><ext>
#   other    -> uploads/documents/<uuid4><ext>
#
# The public URL mirrors the folder (``/uploads/images/<file>``) and is
# how tours, stops and collections refer to a file.  Disk I/O runs in a
# worker thread so the event loop is never blocked.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import io
import os
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

import structlog
from PIL import Image, UnidentifiedImageError

from tourstack.interfaces.media_provider import IMediaProvider
from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.models.media import Media
from tourstack.utils.errors import NotFoundError, PayloadTooLargeError, ValidationError

logger = structlog.get_logger(logger_name=__name__)

UPLOAD_FOLDERS = ("images", "audio", "documents")

# MIME type per folder when the extension is unknown.
_SYNC_FALLBACK_MIME = {
    "images": "image/octet-stream",
    "audio": "audio/octet-stream",
    "documents": "application/octet-stream",
}

_MIME_BY_EXTENSION = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".webm": "audio/webm",
    ".mp4": "video/mp4",
    ".pdf": "application/pdf",
}


def folder_for_mime(mime_type: str) -> str:
    if mime_type.startswith("image/"):
        return "images"
    if mime_type.startswith("audio/"):
        return "audio"
    return "documents"


def probe_image_size(data: bytes) -> tuple[int, int] | None:
    """Pixel dimensions via Pillow, or ``None`` for non-raster data (SVG, PDF...)."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, OSError):
        return None


class MediaService:
    """Stores uploads and keeps the media table in step with the disk."""

    def __init__(
        self,
        store: IMediaProvider,
        tour_store: ITourProvider,
        uploads_dir: str | Path = "uploads",
        max_file_size_mb: int = 100,
        allowed_mime_types: Iterable[str] = (),
    ) -> None:
        self._store = store
        self._tour_store = tour_store
        self._uploads_dir = Path(uploads_dir)
        self._max_bytes = max_file_size_mb * 1024 * 1024
        self._allowed = frozenset(allowed_mime_types)

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    # ── Files ──────────────────────────────────────────────────────────

    def validate_upload(self, mime_type: str, size: int) -> None:
        if size > self._max_bytes:
            raise PayloadTooLargeError(
                message=f"File too large (max {self._max_bytes // (1024 * 1024)}MB)"
            )
        if self._allowed and mime_type not in self._allowed:
            raise ValidationError(message=f"File type {mime_type} not allowed")

    async def store_file(self, original_name: str, mime_type: str, data: bytes) -> dict[str, Any]:
        """Write *data* under the uploads tree and return ``{url, filename, mimeType, size}``.

        No database row is created.
        """
        self.validate_upload(mime_type, len(data))
        folder = folder_for_mime(mime_type)
        stored_name = f"{uuid4()}{Path(original_name).suffix}"
        target = self._uploads_dir / folder / stored_name

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.info("upload_stored", url=f"/uploads/{folder}/{stored_name}", size=len(data))
        return {
            "url": f"/uploads/{folder}/{stored_name}",
            "filename": original_name,
            "mimeType": mime_type,
            "size": len(data),
        }

    async def upload(
        self,
        original_name: str,
        mime_type: str,
        data: bytes,
        *,
        alt: str | None = None,
        caption: str | None = None,
        tags: list[str] | None = None,
        width: int | None = None,
        height: int | None = None,
        duration: float | None = None,
    ) -> Media:
        stored = await self.store_file(original_name, mime_type, data)
        if mime_type.startswith("image/") and (width is None or height is None):
            size = await asyncio.to_thread(probe_image_size, data)
            if size is not None:
                width, height = size

        media = Media(
            id=str(uuid4()),
            filename=original_name,
            mime_type=mime_type,
            size=len(data),
            url=stored["url"],
            width=width,
            height=height,
            duration=duration,
            alt=alt or None,
            caption=caption or None,
            tags=tags or [],
        )
        return await self._store.create_media(media)

    # ── Rows ───────────────────────────────────────────────────────────

    async def list_media(self) -> list[Media]:
        return await self._store.list_media()

    async def get_media(self, media_id: str) -> Media:
        media = await self._store.get_media(media_id)
        if media is None:
            raise NotFoundError(message="Media not found")
        return media

    async def update_media(self, media_id: str, updates: dict[str, Any]) -> Media:
        """Only alt text, caption and tags are editable."""
        media = await self.get_media(media_id)
        changes = {k: v for k, v in updates.items() if k in ("alt", "caption", "tags")}
        if changes.get("tags") is None:
            changes.pop("tags", None)
        return await self._store.update_media(media.merged(changes))

    async def delete_media(self, media_id: str) -> None:
        media = await self.get_media(media_id)
        await self._remove_file(media.url)
        await self._store.delete_media(media_id)
        logger.info("media_deleted", media_id=media_id, url=media.url)

    async def bulk_delete(self, ids: list[str]) -> int:
        if not ids:
            raise ValidationError(message="No IDs provided")
        deleted = 0
        for media_id in ids:
            media = await self._store.get_media(media_id)
            if media is None:
                continue
            await self._remove_file(media.url)
            await self._store.delete_media(media_id)
            deleted += 1
        logger.info("media_bulk_deleted", requested=len(ids), deleted=deleted)
        return deleted

    async def bulk_tags(self, ids: list[str], tags: list[str] | None, mode: str = "add") -> int:
        """Add *tags* to (or, with ``mode="replace"``, set them on) every item."""
        if not ids:
            raise ValidationError(message="No IDs provided")
        if tags is None:
            raise ValidationError(message="No tags provided")
        updated = 0
        for media_id in ids:
            media = await self._store.get_media(media_id)
            if media is None:
                continue
            if mode == "replace":
                new_tags = list(tags)
            else:
                new_tags = list(dict.fromkeys([*media.tags, *tags]))
            await self._store.update_media(media.model_copy(update={"tags": new_tags}))
            updated += 1
        return updated

    async def usage(self, media_id: str) -> dict[str, Any]:
        """Tours and stops that reference this item's URL."""
        media = await self.get_media(media_id)
        url = media.url

        tours = [
            {"id": t.id, "title": t.title, "slug": t.slug, "usageType": "heroImage"}
            for t in await self._tour_store.tours_using_hero_image(url)
        ]

        tour_titles: dict[str, dict[str, str]] = {}
        stops: list[dict[str, Any]] = []
        for stop in await self._tour_store.list_all_stops():
            image = stop.image if isinstance(stop.image, str) else str(stop.image)
            in_image = bool(image) and url in image
            in_content = url in str([b.model_dump(mode="json") for b in stop.content])
            if not (in_image or in_content):
                continue
            if stop.tour_id not in tour_titles:
                tour = await self._tour_store.get_tour(stop.tour_id)
                tour_titles[stop.tour_id] = tour.title if tour else {}
            stops.append({
                "id": stop.id,
                "title": stop.title,
                "slug": stop.slug,
                "tourId": stop.tour_id,
                "tourTitle": tour_titles[stop.tour_id] or None,
                "usageType": "image" if in_image else "content",
            })

        return {"tours": tours, "stops": stops}

    async def sync_uploads(self) -> dict[str, Any]:
        """Create rows for files already on disk that have none."""
        existing = await self._store.list_urls()
        added = skipped = errors = 0

        for folder in UPLOAD_FOLDERS:
            directory = self._uploads_dir / folder
            names = await asyncio.to_thread(_list_files, directory)
            for name in names:
                url = f"/uploads/{folder}/{name}"
                if url in existing:
                    skipped += 1
                    continue
                try:
                    stat = await asyncio.to_thread(os.stat, directory / name)
                    mime_type = _MIME_BY_EXTENSION.get(
                        Path(name).suffix.lower(), _SYNC_FALLBACK_MIME[folder]
                    )
                    await self._store.create_media(Media(
                        id=str(uuid4()),
                        filename=name,
                        mime_type=mime_type,
                        size=stat.st_size,
                        url=url,
                        created_at=_timestamp(stat.st_ctime),
                        updated_at=_timestamp(stat.st_mtime),
                    ))
                    added += 1
                except OSError as exc:
                    logger.warning("media_sync_failed", file=name, error=str(exc))
                    errors += 1

        logger.info("media_sync_complete", added=added, skipped=skipped, errors=errors)
        return {
            "message": (
                f"Sync complete: {added} added, {skipped} already exist, {errors} errors"
            ),
            "added": added,
            "skipped": skipped,
            "errors": errors,
        }

    async def _remove_file(self, url: str) -> None:
        path = self._path_for_url(url)
        if path is not None:
            await asyncio.to_thread(path.unlink, missing_ok=True)

    def _path_for_url(self, url: str) -> Path | None:
        prefix = "/uploads/"
        if not url.startswith(prefix):
            return None
        relative = Path(url[len(prefix):])
        if ".." in relative.parts:
            return None
        return self._uploads_dir / relative


def _list_files(directory: Path) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(
        entry.name
        for entry in directory.iterdir()
        if entry.is_file() and not entry.name.startswith(".")
    )


def _timestamp(epoch: float) -> str:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat()
