"""Media library (``/api/media``).

# ─── ROUTE MAP ────────────────────────────────────────────────────────
#
# Endpoint                    Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/media                  GET     List media, newest first
# /api/media                  POST    Multipart upload → file + Media row
# /api/media/upload           POST    Multipart upload → file only
# /api/media/sync             POST    Create rows for files on disk
# /api/media/bulk             DELETE  Delete several items
# /api/media/bulk/tags        PUT     Add or replace tags on several items
# /api/media/{id}             GET     One item
# /api/media/{id}             PUT     Update alt, caption and tags
# /api/media/{id}             DELETE  Remove file and row
# /api/media/{id}/usage       GET     Tours and stops that reference it
#
# Fixed paths are declared before ``/{media_id}`` so they are not
# captured as ids.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, File, Form, Response, UploadFile, status

from tourstack.api.dependencies import MediaServiceDep
from tourstack.api.schemas import BulkIdsRequest, BulkTagsRequest, MediaUpdateRequest
from tourstack.services.media_service import MediaService
from tourstack.utils.errors import PayloadTooLargeError, ValidationError

router = APIRouter(prefix="/api/media", tags=["media"])

# Read uploads in 64 KB chunks so oversized files are rejected early.
_UPLOAD_CHUNK_SIZE = 64 * 1024


async def _read_upload(file: UploadFile, media: MediaService) -> bytes:
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > media.max_bytes:
            raise PayloadTooLargeError(
                message=f"File too large (max {media.max_bytes // (1024 * 1024)}MB)"
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _parse_tags(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        tags = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(message="tags must be a JSON array of strings") from exc
    if not isinstance(tags, list):
        raise ValidationError(message="tags must be a JSON array of strings")
    return [str(tag) for tag in tags]


@router.get("", summary="List media, newest first")
async def list_media(media: MediaServiceDep) -> list[dict[str, Any]]:
    return [item.to_api() for item in await media.list_media()]


@router.post("", status_code=status.HTTP_201_CREATED, summary="Upload a file and create its media row")
async def upload_media(
    media: MediaServiceDep,
    file: UploadFile = File(...),
    alt: str | None = Form(None),
    caption: str | None = Form(None),
    tags: str | None = Form(None),
    width: int | None = Form(None),
    height: int | None = Form(None),
    duration: float | None = Form(None),
) -> dict[str, Any]:
    mime_type = file.content_type or "application/octet-stream"
    media.validate_upload(mime_type, 0)
    data = await _read_upload(file, media)
    item = await media.upload(
        file.filename or "upload",
        mime_type,
        data,
        alt=alt,
        caption=caption,
        tags=_parse_tags(tags),
        width=width,
        height=height,
        duration=duration,
    )
    return item.to_api()


@router.post(
    "/upload",
    status_code=status.HTTP_201_CREATED,
    summary="Store a file without creating a media row",
)
async def upload_file(media: MediaServiceDep, file: UploadFile = File(...)) -> dict[str, Any]:
    mime_type = file.content_type or "application/octet-stream"
    media.validate_upload(mime_type, 0)
    data = await _read_upload(file, media)
    return await media.store_file(file.filename or "upload", mime_type, data)


@router.post("/sync", summary="Create rows for uploaded files that have none")
async def sync_media(media: MediaServiceDep) -> dict[str, Any]:
    return await media.sync_uploads()


@router.delete("/bulk", status_code=status.HTTP_204_NO_CONTENT, summary="Delete several media items")
async def bulk_delete(body: BulkIdsRequest, media: MediaServiceDep) -> Response:
    await media.bulk_delete(body.ids)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/bulk/tags", summary="Add or replace tags on several media items")
async def bulk_tags(body: BulkTagsRequest, media: MediaServiceDep) -> dict[str, Any]:
    await media.bulk_tags(body.ids, body.tags, body.mode)
    return {"success": True}


@router.get("/{media_id}", summary="Get one media item")
async def get_media(media_id: str, media: MediaServiceDep) -> dict[str, Any]:
    return (await media.get_media(media_id)).to_api()


@router.put("/{media_id}", summary="Update alt text, caption and tags")
async def update_media(media_id: str, body: MediaUpdateRequest, media: MediaServiceDep) -> dict[str, Any]:
    item = await media.update_media(media_id, body.model_dump(exclude_unset=True))
    return item.to_api()


@router.delete("/{media_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a media item")
async def delete_media(media_id: str, media: MediaServiceDep) -> Response:
    await media.delete_media(media_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{media_id}/usage", summary="Tours and stops that reference this item")
async def media_usage(media_id: str, media: MediaServiceDep) -> dict[str, Any]:
    return await media.usage(media_id)
