"""Stop authoring: create, update, reorder and QR regeneration.

Every new stop is appended to its tour (order = max + 1), gets a slug
unique within the tour, and gets QR positioning pointing at its visitor
URL.  Updates are partial; either ``content`` or ``content_blocks`` may
carry the block list.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import structlog

from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.models.content import parse_content_blocks, parse_stop_content
from tourstack.models.tour import Stop
from tourstack.services.positioning import allocate_short_code, build_qr_positioning
from tourstack.utils.errors import NotFoundError
from tourstack.utils.slugs import generate_slug, make_unique_slug_async, title_text

logger = structlog.get_logger(logger_name=__name__)

_PROTECTED_FIELDS = ("id", "tour_id", "slug", "created_at", "updated_at")


class StopService:
    def __init__(self, store: ITourProvider) -> None:
        self._store = store

    async def list_stops(self, tour_id: str) -> list[Stop]:
        return await self._store.list_stops(tour_id)

    async def get_stop(self, stop_id: str) -> Stop:
        stop = await self._store.get_stop(stop_id)
        if stop is None:
            raise NotFoundError(message="Stop not found")
        return stop

    async def create_stop(self, tour_id: str, data: dict[str, Any], base_url: str) -> Stop:
        tour = await self._store.get_tour(tour_id)
        if tour is None:
            raise NotFoundError(message="Tour not found")

        max_order = await self._store.max_stop_order(tour_id)
        title = data.get("title") or {"en": "New Stop"}
        slug = await make_unique_slug_async(
            generate_slug(title_text(title, "New Stop")),
            lambda candidate: self._store.stop_slug_exists(tour_id, candidate),
        )
        short_code = await allocate_short_code(self._store)

        fields = {key: value for key, value in data.items() if value is not None}
        if "content_blocks" in fields:
            fields.setdefault("content", fields.pop("content_blocks"))
        if "content" in fields:
            fields["content"] = parse_content_blocks(fields["content"])
        for key in _PROTECTED_FIELDS:
            fields.pop(key, None)
        fields.update(
            id=str(uuid4()),
            tour_id=tour_id,
            order=(max_order if max_order is not None else -1) + 1,
            title=title,
            slug=slug,
            primary_positioning=build_qr_positioning(
                base_url, tour.slug_or_id, slug, short_code
            ),
        )
        stop = Stop.model_validate(fields)
        return await self._store.create_stop(stop)

    async def update_stop(self, stop_id: str, updates: dict[str, Any]) -> Stop:
        stop = await self.get_stop(stop_id)
        changes = dict(updates)
        if "content_blocks" in changes:
            changes["content"] = changes.pop("content_blocks")
        if "content" in changes:
            changes["content"] = parse_stop_content(changes["content"], stop.content)
        for key in _PROTECTED_FIELDS:
            changes.pop(key, None)
        updated = await self._store.update_stop(stop.merged(changes))
        logger.info("stop_updated", stop_id=stop_id, fields=sorted(changes))
        return updated

    async def delete_stop(self, stop_id: str) -> None:
        if not await self._store.delete_stop(stop_id):
            raise NotFoundError(message="Stop not found")

    async def reorder_stops(self, tour_id: str, stop_ids: list[str]) -> list[Stop]:
        await self._store.set_stop_orders(tour_id, stop_ids)
        return await self._store.list_stops(tour_id)

    async def regenerate_qr(
        self,
        stop_id: str,
        base_url: str,
        regenerate_short_code: bool = False,
    ) -> Stop:
        """Issue a new visitor token and, when asked or missing, a new short code."""
        stop = await self.get_stop(stop_id)
        tour = await self._store.get_tour(stop.tour_id)
        if tour is None:
            raise NotFoundError(message="Tour not found")

        short_code = stop.short_code
        if regenerate_short_code or not short_code:
            short_code = await allocate_short_code(self._store, stop_id=stop.id)

        positioning = build_qr_positioning(base_url, tour.slug_or_id, stop.slug_or_id, short_code)
        updated = await self._store.update_stop(
            stop.model_copy(update={"primary_positioning": {**stop.primary_positioning, **positioning}})
        )
        logger.info("stop_qr_regenerated", stop_id=stop_id, new_short_code=regenerate_short_code)
        return updated
