"""Stop CRUD, reordering and QR regeneration (``/api/stops``).

Fixed paths (``/detail/...``, ``/reorder/...``) are declared before the
``/{tour_id}`` catch-all.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Response, status

from tourstack.api.dependencies import BaseUrlDep, StopServiceDep
from tourstack.api.schemas import (
    RegenerateQRRequest,
    ReorderStopsRequest,
    StopCreateRequest,
    StopUpdateRequest,
)
from tourstack.utils.errors import ValidationError

router = APIRouter(prefix="/api/stops", tags=["stops"])


@router.get("/detail/{stop_id}", summary="Get one stop")
async def get_stop(stop_id: str, stops: StopServiceDep) -> dict[str, Any]:
    return (await stops.get_stop(stop_id)).to_api()


@router.put("/reorder/{tour_id}", summary="Set stop order from a list of ids")
async def reorder_stops(tour_id: str, body: ReorderStopsRequest, stops: StopServiceDep) -> list[dict[str, Any]]:
    return [stop.to_api() for stop in await stops.reorder_stops(tour_id, body.stop_ids)]


@router.get("/{tour_id}", summary="List the stops of a tour")
async def list_stops(tour_id: str, stops: StopServiceDep) -> list[dict[str, Any]]:
    return [stop.to_api() for stop in await stops.list_stops(tour_id)]


@router.post("", status_code=status.HTTP_201_CREATED, summary="Append a stop to a tour")
async def create_stop(body: StopCreateRequest, stops: StopServiceDep, base_url: BaseUrlDep) -> dict[str, Any]:
    data = body.model_dump(exclude_unset=True)
    tour_id = data.pop("tour_id", None)
    if not tour_id:
        raise ValidationError(message="tourId is required")
    stop = await stops.create_stop(tour_id, data, base_url)
    return stop.to_api()


@router.put("/{stop_id}", summary="Partially update a stop")
async def update_stop(stop_id: str, body: StopUpdateRequest, stops: StopServiceDep) -> dict[str, Any]:
    stop = await stops.update_stop(stop_id, body.model_dump(exclude_unset=True))
    return stop.to_api()


@router.delete("/{stop_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a stop")
async def delete_stop(stop_id: str, stops: StopServiceDep) -> Response:
    await stops.delete_stop(stop_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{stop_id}/qr/regenerate", summary="Issue a new QR token and optionally a new short code")
async def regenerate_qr(
    stop_id: str,
    stops: StopServiceDep,
    base_url: BaseUrlDep,
    body: RegenerateQRRequest | None = None,
) -> dict[str, Any]:
    regenerate = body.regenerate_short_code if body is not None else False
    stop = await stops.regenerate_qr(stop_id, base_url, regenerate_short_code=regenerate)
    return stop.to_api()
