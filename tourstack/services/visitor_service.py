"""Public visitor lookups by slug, id or printed short code.

Slugs are tried first and raw ids second, so old QR codes printed with
ids keep working after slugs were backfilled.  Both paths return the same
model, which keeps the payloads identical.
"""

from __future__ import annotations

from typing import Any

from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.models.tour import Stop, Tour
from tourstack.utils.errors import NotFoundError
from tourstack.utils.slugs import build_visitor_path


class VisitorService:
    def __init__(self, store: ITourProvider) -> None:
        self._store = store

    async def get_tour(self, slug_or_id: str) -> Tour:
        tour = await self._store.get_tour_by_slug(slug_or_id)
        if tour is None:
            tour = await self._store.get_tour(slug_or_id)
        if tour is None:
            raise NotFoundError(message="Tour not found")
        return tour

    async def get_stop(self, tour_slug_or_id: str, stop_slug_or_id: str) -> tuple[Tour, Stop]:
        """Resolve a stop within its tour; the returned tour still holds all stops."""
        tour = await self.get_tour(tour_slug_or_id)
        stop = next((s for s in tour.stops if s.slug == stop_slug_or_id), None)
        if stop is None:
            stop = next((s for s in tour.stops if s.id == stop_slug_or_id), None)
        if stop is None:
            raise NotFoundError(message="Stop not found")
        return tour, stop

    async def resolve_short_code(self, short_code: str) -> dict[str, Any]:
        stop = await self._store.find_stop_by_short_code(short_code)
        if stop is None:
            raise NotFoundError(message="Short code not found")
        tour = await self._store.get_tour(stop.tour_id)
        tour_slug = tour.slug_or_id if tour else stop.tour_id
        stop_slug = stop.slug_or_id
        return {
            "redirectUrl": build_visitor_path(tour_slug, stop_slug),
            "tourSlug": tour_slug,
            "stopSlug": stop_slug,
        }
