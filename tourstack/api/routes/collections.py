"""Collections of media items (``/api/collections``)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Response, status

from tourstack.api.dependencies import CollectionServiceDep
from tourstack.api.schemas import CollectionRequest

router = APIRouter(prefix="/api/collections", tags=["collections"])


@router.get("", summary="List collections, optionally filtered")
async def list_collections(
    collections: CollectionServiceDep,
    type: str | None = None,  # noqa: A002
    museumId: str | None = None,  # noqa: N803
) -> list[dict[str, Any]]:
    items = await collections.list_collections(collection_type=type, museum_id=museumId)
    return [collection.to_api() for collection in items]


@router.get("/{collection_id}", summary="Get one collection")
async def get_collection(collection_id: str, collections: CollectionServiceDep) -> dict[str, Any]:
    return (await collections.get_collection(collection_id)).to_api()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a collection")
async def create_collection(body: CollectionRequest, collections: CollectionServiceDep) -> dict[str, Any]:
    collection = await collections.create_collection(body.model_dump(exclude_unset=True))
    return collection.to_api()


@router.put("/{collection_id}", summary="Partially update a collection")
async def update_collection(
    collection_id: str,
    body: CollectionRequest,
    collections: CollectionServiceDep,
) -> dict[str, Any]:
    collection = await collections.update_collection(collection_id, body.model_dump(exclude_unset=True))
    return collection.to_api()


@router.delete("/{collection_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a collection")
async def delete_collection(collection_id: str, collections: CollectionServiceDep) -> Response:
    await collections.delete_collection(collection_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{collection_id}/items",
    status_code=status.HTTP_201_CREATED,
    summary="Append an item to a collection",
)
async def add_item(
    collection_id: str,
    collections: CollectionServiceDep,
    item: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    return (await collections.add_item(collection_id, item)).to_api()


@router.delete("/{collection_id}/items/{item_id}", summary="Remove an item and renumber the rest")
async def remove_item(collection_id: str, item_id: str, collections: CollectionServiceDep) -> dict[str, Any]:
    return (await collections.remove_item(collection_id, item_id)).to_api()
