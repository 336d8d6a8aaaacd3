"""Unit tests for TourService, StopService and VisitorService.

The services run against a real temporary SQLite database so slug
uniqueness, stop ordering and the tour -> stop cascade are exercised
end to end.
"""

from __future__ import annotations

import aiosqlite
import pydantic
import pytest

from tourstack.models.tour import TourStatus
from tourstack.services.stop_service import StopService
from tourstack.services.tour_service import TourService
from tourstack.services.visitor_service import VisitorService
from tourstack.utils.errors import NotFoundError, ValidationError
from tourstack.utils.slugs import SHORT_CODE_ALPHABET, extract_token

BASE_URL = "https://museum.example"


@pytest.fixture
def tours(tour_store, template) -> TourService:
    return TourService(tour_store)


@pytest.fixture
def stops(tour_store) -> StopService:
    return StopService(tour_store)


@pytest.fixture
def visitor(tour_store) -> VisitorService:
    return VisitorService(tour_store)


async def _tour_with_stops(tours: TourService, stops: StopService, *titles: str):
    tour = await tours.create_tour({"title": {"en": "Ancient Egypt"}})
    created = [await stops.create_stop(tour.id, {"title": {"en": t}}, BASE_URL) for t in titles]
    return tour, created


# ─── TourService ──────────────────────────────────────────────────


class TestCreateTour:
    async def test_defaults_and_slug(self, tours, template):
        tour = await tours.create_tour({"title": {"en": "The Ancient World: Egypt & Rome!"}})
        assert tour.slug == "the-ancient-world-egypt-rome"
        assert tour.status == TourStatus.DRAFT
        assert tour.version == 1
        assert tour.template_id == template.id

    async def test_creates_default_museum_once(self, tours, tour_store):
        first = await tours.create_tour({})
        second = await tours.create_tour({})
        assert first.museum_id == second.museum_id
        museum = await tour_store.get_first_museum()
        assert museum.name == "My Museum"

    async def test_untitled_tour(self, tours):
        tour = await tours.create_tour({})
        assert tour.title == {"en": "Untitled Tour"}
        assert tour.slug == "untitled-tour"

    async def test_duplicate_titles_get_numbered_slugs(self, tours):
        slugs = [(await tours.create_tour({"title": {"en": "Highlights"}})).slug for _ in range(3)]
        assert slugs == ["highlights", "highlights-1", "highlights-2"]

    async def test_status_and_version_ignored(self, tours):
        tour = await tours.create_tour({"status": "published", "version": 7})
        assert tour.status == TourStatus.DRAFT
        assert tour.version == 1

    async def test_primary_language_added_to_languages(self, tours):
        tour = await tours.create_tour({"languages": ["en"], "primary_language": "fr"})
        assert tour.languages == ["en", "fr"]

    async def test_unknown_template_falls_back_to_first(self, tours, template):
        tour = await tours.create_tour({"template_id": "does-not-exist"})
        assert tour.template_id == template.id

    async def test_no_templates_rejected(self, tour_store):
        with pytest.raises(ValidationError, match="No templates available"):
            await TourService(tour_store).create_tour({})


class TestUpdateTour:
    async def test_partial_update(self, tours):
        tour = await tours.create_tour({"title": {"en": "Egypt"}, "duration": 20})
        updated = await tours.update_tour(tour.id, {"status": "published", "duration": 60})
        assert updated.status == TourStatus.PUBLISHED
        assert updated.duration == 60
        assert updated.title == {"en": "Egypt"}
        assert updated.slug == tour.slug

    async def test_slug_and_id_not_editable(self, tours):
        tour = await tours.create_tour({"title": {"en": "Egypt"}})
        updated = await tours.update_tour(tour.id, {"slug": "hacked", "id": "other"})
        assert updated.id == tour.id
        assert updated.slug == "egypt"

    async def test_keeps_primary_language(self, tours):
        tour = await tours.create_tour({})
        updated = await tours.update_tour(tour.id, {"languages": ["de"], "primary_language": "en"})
        assert updated.languages == ["de", "en"]

    async def test_updates_embedded_stops(self, tours, stops):
        tour, (stop,) = await _tour_with_stops(tours, stops, "Rosetta Stone")
        updated = await tours.update_tour(tour.id, {
            "stops": [{
                "id": stop.id,
                "title": {"en": "The Rosetta Stone"},
                "content_blocks": [{"type": "text", "data": {"content": {"en": "Basalt"}}}],
            }],
        })
        (reloaded,) = updated.stops
        assert reloaded.title == {"en": "The Rosetta Stone"}
        assert reloaded.content[0].data.content == {"en": "Basalt"}
        assert reloaded.slug == stop.slug

    async def test_bad_status_rejected(self, tours):
        tour = await tours.create_tour({})
        with pytest.raises(pydantic.ValidationError):
            await tours.update_tour(tour.id, {"status": "gone"})

    async def test_missing_tour(self, tours):
        with pytest.raises(NotFoundError):
            await tours.update_tour("nope", {"duration": 5})


class TestDeleteAndDuplicate:
    async def test_delete_cascades(self, tours, stops, tour_store):
        tour, (stop,) = await _tour_with_stops(tours, stops, "Rosetta Stone")
        await tours.delete_tour(tour.id)
        assert await tour_store.get_stop(stop.id) is None
        with pytest.raises(NotFoundError):
            await tours.delete_tour(tour.id)

    async def test_duplicate(self, tours, stops):
        tour, originals = await _tour_with_stops(tours, stops, "Rosetta Stone", "Sarcophagus")
        await tours.update_tour(tour.id, {"status": "published"})

        copy = await tours.duplicate_tour(tour.id, BASE_URL)
        assert copy.id != tour.id
        assert copy.title == {"en": "Ancient Egypt (Copy)"}
        assert copy.slug == "ancient-egypt-copy"
        assert copy.status == TourStatus.DRAFT
        assert [s.slug for s in copy.stops] == [s.slug for s in originals]
        for new, old in zip(copy.stops, originals):
            assert new.id != old.id
            assert new.short_code != old.short_code
            assert new.primary_positioning["url"].startswith(
                f"{BASE_URL}/visitor/tour/ancient-egypt-copy/stop/{new.slug}?t="
            )

    async def test_duplicate_missing(self, tours):
        with pytest.raises(NotFoundError):
            await tours.duplicate_tour("nope", BASE_URL)


# ─── StopService ──────────────────────────────────────────────────


class TestStops:
    async def test_create_appends_with_qr(self, tours, stops):
        tour, (first, second) = await _tour_with_stops(tours, stops, "Rosetta Stone", "Rosetta Stone")
        assert (first.order, second.order) == (0, 1)
        assert (first.slug, second.slug) == ("rosetta-stone", "rosetta-stone-1")
        positioning = first.primary_positioning
        assert positioning["method"] == "qr_code"
        assert positioning["url"].startswith(f"{BASE_URL}/visitor/tour/ancient-egypt/stop/rosetta-stone?t=")
        assert all(ch in SHORT_CODE_ALPHABET for ch in positioning["shortCode"])
        assert first.short_code != second.short_code

    async def test_create_accepts_content_blocks_alias(self, tours, stops):
        tour = await tours.create_tour({})
        stop = await stops.create_stop(
            tour.id,
            {"content_blocks": [{"type": "quote", "data": {"author": {"en": "Herodotus", "fr": "Hérodote"}}}]},
            BASE_URL,
        )
        assert stop.content[0].data.author == {"en": "Herodotus", "fr": "Hérodote"}
        assert stop.title == {"en": "New Stop"}

    async def test_quote_author_plain_string(self, tours, stops):
        tour = await tours.create_tour({})
        stop = await stops.create_stop(
            tour.id, {"content": [{"type": "quote", "data": {"author": "Herodotus"}}]}, BASE_URL
        )
        assert stop.content[0].data.author == "Herodotus"

    async def test_update_with_localized_quote(self, tours, stops, tour_store):
        _, (stop,) = await _tour_with_stops(tours, stops, "Natural History")
        await stops.update_stop(stop.id, {"content": [{
            "type": "quote",
            "data": {"quote": {"en": "q"}, "author": {"en": "Pliny"}, "source": {"en": "Book VII"}},
        }]})
        (block,) = (await tour_store.get_stop(stop.id)).content
        assert block.data.author == {"en": "Pliny"}
        assert block.data.source == {"en": "Book VII"}

    async def test_unknown_block_type_rejected(self, tours, stops):
        _, (stop,) = await _tour_with_stops(tours, stops, "Rosetta Stone")
        with pytest.raises(pydantic.ValidationError):
            await stops.update_stop(stop.id, {"content": [{"type": "hologram", "data": {}}]})

    async def test_stored_block_survives_resave(self, tours, stops, tour_store, db_path):
        _, (stop,) = await _tour_with_stops(tours, stops, "Rosetta Stone")
        async with aiosqlite.connect(db_path) as db:
            await db.execute(
                "UPDATE stops SET content = ? WHERE id = ?;",
                ('[{"id": "old", "type": "hologram", "data": {"beam": 3}}]', stop.id),
            )
            await db.commit()
        loaded = await stops.get_stop(stop.id)
        resent = [block.to_api() for block in loaded.content]
        resent.append({"type": "text", "data": {"content": {"en": "New"}}})
        updated = await stops.update_stop(stop.id, {"content_blocks": resent})
        assert [b.type for b in updated.content] == ["hologram", "text"]
        assert updated.content[0].data == {"beam": 3}

    async def test_create_for_missing_tour(self, stops):
        with pytest.raises(NotFoundError, match="Tour not found"):
            await stops.create_stop("nope", {}, BASE_URL)

    async def test_update_is_partial(self, tours, stops):
        _, (stop,) = await _tour_with_stops(tours, stops, "Rosetta Stone")
        updated = await stops.update_stop(stop.id, {"type": "bonus", "slug": "ignored"})
        assert updated.type.value == "bonus"
        assert updated.title == {"en": "Rosetta Stone"}
        assert updated.slug == "rosetta-stone"

    async def test_reorder(self, tours, stops):
        tour, created = await _tour_with_stops(tours, stops, "A", "B", "C")
        ids = [created[2].id, created[0].id, created[1].id]
        reordered = await stops.reorder_stops(tour.id, ids)
        assert [s.id for s in reordered] == ids

    async def test_delete(self, tours, stops):
        _, (stop,) = await _tour_with_stops(tours, stops, "A")
        await stops.delete_stop(stop.id)
        with pytest.raises(NotFoundError):
            await stops.get_stop(stop.id)
        with pytest.raises(NotFoundError):
            await stops.delete_stop(stop.id)

    async def test_regenerate_qr_keeps_short_code(self, tours, stops):
        _, (stop,) = await _tour_with_stops(tours, stops, "Rosetta Stone")
        old_token = extract_token(stop.primary_positioning["url"])
        regenerated = await stops.regenerate_qr(stop.id, "https://other.example")
        assert regenerated.short_code == stop.short_code
        assert regenerated.primary_positioning["url"].startswith("https://other.example/visitor/")
        assert extract_token(regenerated.primary_positioning["url"]) != old_token

    async def test_regenerate_qr_with_new_short_code(self, tours, stops, tour_store):
        _, (stop,) = await _tour_with_stops(tours, stops, "Rosetta Stone")
        regenerated = await stops.regenerate_qr(stop.id, BASE_URL, regenerate_short_code=True)
        assert regenerated.short_code
        found = await tour_store.find_stop_by_short_code(regenerated.short_code)
        assert found.id == stop.id


# ─── VisitorService ───────────────────────────────────────────────


class TestVisitor:
    async def test_tour_by_slug_or_id(self, tours, stops, visitor):
        tour, _ = await _tour_with_stops(tours, stops, "Rosetta Stone")
        assert (await visitor.get_tour("ancient-egypt")).id == tour.id
        assert (await visitor.get_tour(tour.id)).id == tour.id

    async def test_unknown_tour(self, visitor):
        with pytest.raises(NotFoundError, match="Tour not found"):
            await visitor.get_tour("nope")

    async def test_stop_by_slug_or_id(self, tours, stops, visitor):
        _, (a, b) = await _tour_with_stops(tours, stops, "Rosetta Stone", "Sarcophagus")
        tour, stop = await visitor.get_stop("ancient-egypt", "sarcophagus")
        assert stop.id == b.id
        assert len(tour.stops) == 2
        _, by_id = await visitor.get_stop("ancient-egypt", a.id)
        assert by_id.id == a.id

    async def test_stop_from_other_tour_not_found(self, tours, stops, visitor):
        await _tour_with_stops(tours, stops, "Rosetta Stone")
        other = await tours.create_tour({"title": {"en": "Rome"}})
        with pytest.raises(NotFoundError, match="Stop not found"):
            await visitor.get_stop(other.slug, "rosetta-stone")

    async def test_resolve_short_code(self, tours, stops, visitor):
        _, (stop,) = await _tour_with_stops(tours, stops, "Rosetta Stone")
        result = await visitor.resolve_short_code(stop.short_code.lower())
        assert result == {
            "redirectUrl": "/visitor/tour/ancient-egypt/stop/rosetta-stone",
            "tourSlug": "ancient-egypt",
            "stopSlug": "rosetta-stone",
        }

    async def test_unknown_short_code(self, visitor):
        with pytest.raises(NotFoundError, match="Short code not found"):
            await visitor.resolve_short_code("ZZZZZZ")
