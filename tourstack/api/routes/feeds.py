"""Read-only JSON feeds for external consumers (``/api/feeds``)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from tourstack.api.dependencies import FeedServiceDep

router = APIRouter(prefix="/api/feeds", tags=["feeds"])


@router.get("/tours", summary="All tours in feed format")
async def tours_feed(feeds: FeedServiceDep) -> dict[str, Any]:
    return await feeds.tours_feed()


@router.get("/tours/{tour_id}", summary="One tour in feed format")
async def tour_feed(tour_id: str, feeds: FeedServiceDep) -> dict[str, Any]:
    return await feeds.tour_feed(tour_id)


@router.get("/tours/{tour_id}/stops", summary="The stops of one tour in feed format")
async def stops_feed(tour_id: str, feeds: FeedServiceDep) -> dict[str, Any]:
    return await feeds.stops_feed(tour_id)
