"""Read-only snake_case feeds of tours for kiosks and external consumers.

The feed schema is versioned independently of the admin API so that
consumers can pin to it:

    {"version": "1.0", "generated_at": "...", "total_tours": 2, "tours": [...]}
"""

from __future__ import annotations

from typing import Any

from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.models.base import utc_now
from tourstack.models.tour import Stop, Tour
from tourstack.utils.errors import NotFoundError

FEED_VERSION = "1.0"


def format_stop(stop: Stop) -> dict[str, Any]:
    return {
        "id": stop.id,
        "title": stop.title,
        "order": stop.order,
        "content_blocks": [b.model_dump(mode="json", by_alias=True) for b in stop.content],
        "positioning": stop.primary_positioning or None,
        "created_at": stop.created_at,
        "updated_at": stop.updated_at,
    }


def format_tour(tour: Tour) -> dict[str, Any]:
    return {
        "id": tour.id,
        "title": tour.title,
        "description": tour.description,
        "hero_image": tour.hero_image,
        "status": tour.status.value,
        "languages": tour.languages,
        "estimated_duration": tour.duration,
        "difficulty": tour.difficulty.value,
        "created_at": tour.created_at,
        "updated_at": tour.updated_at,
        "stops": [format_stop(s) for s in tour.stops],
        "stop_count": len(tour.stops),
    }


class FeedService:
    def __init__(self, store: ITourProvider) -> None:
        self._store = store

    async def tours_feed(self) -> dict[str, Any]:
        tours = await self._store.list_tours()
        return {
            "version": FEED_VERSION,
            "generated_at": utc_now(),
            "total_tours": len(tours),
            "tours": [format_tour(t) for t in tours],
        }

    async def tour_feed(self, tour_id: str) -> dict[str, Any]:
        tour = await self._get(tour_id)
        return {"version": FEED_VERSION, "generated_at": utc_now(), "tour": format_tour(tour)}

    async def stops_feed(self, tour_id: str) -> dict[str, Any]:
        tour = await self._get(tour_id)
        return {
            "version": FEED_VERSION,
            "generated_at": utc_now(),
            "tour_id": tour.id,
            "tour_title": tour.title,
            "total_stops": len(tour.stops),
            "stops": [format_stop(s) for s in tour.stops],
        }

    async def _get(self, tour_id: str) -> Tour:
        tour = await self._store.get_tour(tour_id)
        if tour is None:
            raise NotFoundError(message="Tour not found")
        return tour
