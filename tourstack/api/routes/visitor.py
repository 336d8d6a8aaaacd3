"""Public visitor lookups (``/api/visitor``).  No session required."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from tourstack.api.dependencies import VisitorServiceDep

router = APIRouter(prefix="/api/visitor", tags=["visitor"])


@router.get("/tour/{slug_or_id}", summary="Tour by slug or id, with stops")
async def get_tour(slug_or_id: str, visitor: VisitorServiceDep) -> dict[str, Any]:
    return (await visitor.get_tour(slug_or_id)).to_api()


@router.get("/tour/{tour_slug_or_id}/stop/{stop_slug_or_id}", summary="One stop within its tour")
async def get_stop(tour_slug_or_id: str, stop_slug_or_id: str, visitor: VisitorServiceDep) -> dict[str, Any]:
    tour, stop = await visitor.get_stop(tour_slug_or_id, stop_slug_or_id)
    return {
        "tour": tour.model_copy(update={"stops": []}).to_api(),
        "stop": stop.to_api(),
        "allStops": [s.to_api() for s in tour.stops],
    }


@router.get("/s/{short_code}", summary="Resolve a printed short code")
async def resolve_short_code(short_code: str, visitor: VisitorServiceDep) -> dict[str, Any]:
    return await visitor.resolve_short_code(short_code)
