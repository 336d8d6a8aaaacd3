"""Abstract base class for tour, stop, museum and template persistence.

# ─── ADAPTER PATTERN ─────────────────────────────────────────────────
#
# ITourProvider is the single persistence contract for the authoring
# graph: museums own tours, tours own stops, and every tour points at a
# positioning template.  The concrete implementation is SQLiteTourProvider
# (tourstack/providers/storage/sqlite_tour_provider.py).
#
# Providers speak domain models only.  JSON-encoded columns are parsed
# before a model leaves the provider, so services never see raw rows.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tourstack.models.template import Template
from tourstack.models.tour import Museum, Stop, Tour


# Concrete implementation: SQLiteTourProvider (tourstack/providers/storage/)
class ITourProvider(ABC):
    """Contract for tour authoring persistence.  All storage operations are async."""

    # ── Lifecycle ──────────────────────────────────────────────────────

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    # ── Museums ────────────────────────────────────────────────────────

    @abstractmethod
    async def get_first_museum(self) -> Museum | None:
        """Return the oldest museum, or ``None`` when none exists."""

    @abstractmethod
    async def create_museum(self, museum: Museum) -> Museum:
        """Persist a new museum."""

    # ── Templates ──────────────────────────────────────────────────────

    @abstractmethod
    async def list_templates(self) -> list[Template]:
        """All templates sorted by name."""

    @abstractmethod
    async def get_template(self, template_id: str) -> Template | None:
        """Retrieve a template by id."""

    @abstractmethod
    async def find_template(self, name: str, built_in: bool) -> Template | None:
        """Retrieve a template by its (name, built_in) pair."""

    @abstractmethod
    async def save_template(self, template: Template) -> Template:
        """Insert or replace a template."""

    # ── Tours ──────────────────────────────────────────────────────────

    @abstractmethod
    async def list_tours(self) -> list[Tour]:
        """All tours with their ordered stops, most recently updated first."""

    @abstractmethod
    async def get_tour(self, tour_id: str) -> Tour | None:
        """Retrieve a tour with its ordered stops."""

    @abstractmethod
    async def get_tour_by_slug(self, slug: str) -> Tour | None:
        """Retrieve a tour with its ordered stops by slug."""

    @abstractmethod
    async def tour_slug_exists(self, slug: str) -> bool:
        """Return ``True`` if any tour already uses *slug*."""

    @abstractmethod
    async def create_tour(self, tour: Tour) -> Tour:
        """Persist a new tour (its ``stops`` list is ignored)."""

    @abstractmethod
    async def update_tour(self, tour: Tour) -> Tour:
        """Write every column of *tour* and refresh ``updated_at``.

        Raises
        ------
        tourstack.utils.errors.NotFoundError
            If no tour has ``tour.id``.
        """

    @abstractmethod
    async def delete_tour(self, tour_id: str) -> bool:
        """Delete a tour and, by cascade, its stops.  Returns ``True`` if found."""

    @abstractmethod
    async def tours_using_hero_image(self, url: str) -> list[Tour]:
        """Tours whose hero image equals *url* (stops not loaded)."""

    # ── Stops ──────────────────────────────────────────────────────────

    @abstractmethod
    async def list_stops(self, tour_id: str) -> list[Stop]:
        """Stops of a tour ordered by ``order``."""

    @abstractmethod
    async def list_all_stops(self) -> list[Stop]:
        """Every stop in the database (used by media usage and slug backfill)."""

    @abstractmethod
    async def get_stop(self, stop_id: str) -> Stop | None:
        """Retrieve a stop by id."""

    @abstractmethod
    async def get_stop_by_slug(self, tour_id: str, slug: str) -> Stop | None:
        """Retrieve a stop by slug within one tour."""

    @abstractmethod
    async def find_stop_by_short_code(self, short_code: str) -> Stop | None:
        """Case-insensitive lookup of the stop whose QR short code matches."""

    @abstractmethod
    async def stop_slug_exists(self, tour_id: str, slug: str) -> bool:
        """Return ``True`` if a stop in *tour_id* already uses *slug*."""

    @abstractmethod
    async def max_stop_order(self, tour_id: str) -> int | None:
        """Highest stop order in the tour, or ``None`` when it has no stops."""

    @abstractmethod
    async def create_stop(self, stop: Stop) -> Stop:
        """Persist a new stop."""

    @abstractmethod
    async def update_stop(self, stop: Stop) -> Stop:
        """Write every column of *stop* and refresh ``updated_at``."""

    @abstractmethod
    async def delete_stop(self, stop_id: str) -> bool:
        """Delete a stop.  Returns ``True`` if it existed."""

    @abstractmethod
    async def set_stop_orders(self, tour_id: str, stop_ids: list[str]) -> None:
        """Set each listed stop's order to its index in *stop_ids*."""
