"""Backfill slugs for tours and stops created before slugs existed.

Existing slugs are kept.  A stop that receives a slug also has its QR
URL rebuilt with the new path; the ``?t=`` token and short code stay the
same so printed codes keep resolving.
"""

from __future__ import annotations

import structlog

from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.utils.slugs import (
    build_visitor_url,
    extract_token,
    generate_qr_token,
    generate_slug,
    make_unique_slug,
    title_text,
)

logger = structlog.get_logger(logger_name=__name__)


class SlugMigration:
    def __init__(self, store: ITourProvider) -> None:
        self._store = store

    async def run(self) -> dict[str, int]:
        """Returns how many tours and stops received a slug."""
        tours = await self._store.list_tours()
        tour_slugs = {t.slug for t in tours if t.slug}
        slug_by_tour: dict[str, str] = {}
        tours_updated = 0

        for tour in tours:
            if tour.slug:
                slug_by_tour[tour.id] = tour.slug
                continue
            slug = make_unique_slug(
                generate_slug(title_text(tour.title, "Untitled")), tour_slugs.__contains__
            )
            tour_slugs.add(slug)
            slug_by_tour[tour.id] = slug
            await self._store.update_tour(tour.model_copy(update={"slug": slug}))
            tours_updated += 1
            logger.info("tour_slug_backfilled", tour_id=tour.id, slug=slug)

        stops = await self._store.list_all_stops()
        stop_slugs: dict[str, set[str]] = {}
        for stop in stops:
            if stop.slug:
                stop_slugs.setdefault(stop.tour_id, set()).add(stop.slug)

        stops_updated = 0
        for stop in stops:
            if stop.slug:
                continue
            taken = stop_slugs.setdefault(stop.tour_id, set())
            slug = make_unique_slug(
                generate_slug(title_text(stop.title, "Untitled")), taken.__contains__
            )
            taken.add(slug)

            positioning = dict(stop.primary_positioning)
            url = positioning.get("url")
            if url:
                base_url = url.split("/visitor/")[0]
                token = extract_token(url) or generate_qr_token()
                positioning["url"] = build_visitor_url(
                    base_url, slug_by_tour.get(stop.tour_id, "unknown"), slug, token
                )

            await self._store.update_stop(
                stop.model_copy(update={"slug": slug, "primary_positioning": positioning})
            )
            stops_updated += 1
            logger.info("stop_slug_backfilled", stop_id=stop.id, slug=slug)

        return {"tours": tours_updated, "stops": stops_updated}
