"""Tour authoring: create, update, duplicate and delete tours.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (business logic orchestration).
# Depends on: ITourProvider.
#
# Rules enforced here rather than in routes or the provider:
#   - A default museum ("My Museum") exists before the first tour.
#   - New tours are always draft, version 1, with a unique slug.
#   - ``languages`` always contains ``primary_language``.
#   - Duplicates get " (Copy)" titles, a fresh slug and fresh QR
#     positioning for every copied stop.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import structlog

from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.models.base import utc_now
from tourstack.models.content import parse_stop_content
from tourstack.models.tour import Museum, Stop, Tour, TourStatus, with_primary_language
from tourstack.services.positioning import allocate_short_code, build_qr_positioning
from tourstack.utils.errors import NotFoundError, ValidationError
from tourstack.utils.slugs import generate_slug, make_unique_slug_async, title_text

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_MUSEUM_NAME = "My Museum"
DEFAULT_BRANDING = {"primaryColor": "#6366f1", "secondaryColor": "#8b5cf6"}

# Stop fields a tour update may overwrite in place.
_STOP_FIELDS_FROM_TOUR_UPDATE = (
    "order",
    "title",
    "description",
    "content",
    "image",
    "custom_field_values",
    "primary_positioning",
    "backup_positioning",
    "triggers",
    "interactive",
    "links",
    "accessibility",
)


class TourService:
    """Business rules for tours.  All dependencies are constructor-injected."""

    def __init__(self, store: ITourProvider) -> None:
        self._store = store

    async def list_tours(self) -> list[Tour]:
        return await self._store.list_tours()

    async def get_tour(self, tour_id: str) -> Tour:
        tour = await self._store.get_tour(tour_id)
        if tour is None:
            raise NotFoundError(message="Tour not found")
        return tour

    async def ensure_default_museum(self) -> Museum:
        museum = await self._store.get_first_museum()
        if museum is None:
            museum = await self._store.create_museum(
                Museum(id=str(uuid4()), name=DEFAULT_MUSEUM_NAME, branding=dict(DEFAULT_BRANDING))
            )
        return museum

    async def create_tour(self, data: dict[str, Any]) -> Tour:
        """Create a draft tour from snake_case *data*; missing fields take defaults."""
        museum = await self.ensure_default_museum()

        template = None
        if data.get("template_id"):
            template = await self._store.get_template(data["template_id"])
        if template is None:
            templates = await self._store.list_templates()
            template = templates[0] if templates else None
        if template is None:
            raise ValidationError(message="No templates available")

        title = data.get("title") or {"en": "Untitled Tour"}
        slug = await make_unique_slug_async(
            generate_slug(title_text(title, "Untitled Tour")),
            self._store.tour_slug_exists,
        )

        fields = {
            key: value
            for key, value in data.items()
            if value is not None and key not in ("id", "status", "version", "slug", "stops")
        }
        fields.update(
            id=str(uuid4()),
            museum_id=museum.id,
            template_id=template.id,
            title=title,
            status=TourStatus.DRAFT,
            version=1,
            slug=slug,
        )
        tour = Tour.model_validate(fields)
        tour = tour.model_copy(
            update={"languages": with_primary_language(tour.languages, tour.primary_language)}
        )
        return await self._store.create_tour(tour)

    async def update_tour(self, tour_id: str, updates: dict[str, Any]) -> Tour:
        """Apply a partial update.  ``stops`` entries with an id are updated in place."""
        tour = await self.get_tour(tour_id)
        stop_updates = updates.pop("stops", None)
        for key in ("id", "museum_id", "slug", "version", "created_at", "updated_at"):
            updates.pop(key, None)

        if stop_updates:
            for stop_data in stop_updates:
                await self._apply_stop_update(tour_id, stop_data)

        updated = tour.merged(updates)
        updated = updated.merged(
            {"languages": with_primary_language(updated.languages, updated.primary_language)}
        )
        await self._store.update_tour(updated)
        logger.info("tour_updated", tour_id=tour_id, fields=sorted(updates))
        return await self.get_tour(tour_id)

    async def delete_tour(self, tour_id: str) -> None:
        if not await self._store.delete_tour(tour_id):
            raise NotFoundError(message="Tour not found")

    async def duplicate_tour(self, tour_id: str, base_url: str) -> Tour:
        original = await self.get_tour(tour_id)
        title = {lang: f"{text} (Copy)" for lang, text in original.title.items()}
        slug = await make_unique_slug_async(
            generate_slug(title_text(title, "tour")),
            self._store.tour_slug_exists,
        )
        now = utc_now()
        duplicate = original.model_copy(update={
            "id": str(uuid4()),
            "title": title,
            "slug": slug,
            "status": TourStatus.DRAFT,
            "version": 1,
            "published_at": None,
            "scheduled_publish_at": None,
            "created_at": now,
            "updated_at": now,
            "stops": [],
        })
        await self._store.create_tour(duplicate)

        for stop in original.stops:
            stop_slug = await make_unique_slug_async(
                stop.slug or generate_slug(title_text(stop.title, "stop")),
                lambda candidate: self._store.stop_slug_exists(duplicate.id, candidate),
            )
            short_code = await allocate_short_code(self._store)
            await self._store.create_stop(stop.model_copy(update={
                "id": str(uuid4()),
                "tour_id": duplicate.id,
                "slug": stop_slug,
                "primary_positioning": build_qr_positioning(base_url, slug, stop_slug, short_code),
                "created_at": now,
                "updated_at": now,
            }))

        logger.info("tour_duplicated", source_id=tour_id, tour_id=duplicate.id, stops=len(original.stops))
        return await self.get_tour(duplicate.id)

    async def _apply_stop_update(self, tour_id: str, stop_data: dict[str, Any]) -> None:
        stop_id = stop_data.get("id")
        if not stop_id:
            return
        stop = await self._store.get_stop(stop_id)
        if stop is None or stop.tour_id != tour_id:
            logger.warning("tour_update_stop_skipped", tour_id=tour_id, stop_id=stop_id)
            return
        changes = {
            key: stop_data[key] for key in _STOP_FIELDS_FROM_TOUR_UPDATE if key in stop_data
        }
        if "content_blocks" in stop_data and "content" not in changes:
            changes["content"] = stop_data["content_blocks"]
        if "content" in changes:
            changes["content"] = parse_stop_content(changes["content"], stop.content)
        updated: Stop = stop.merged(changes)
        await self._store.update_stop(updated)
