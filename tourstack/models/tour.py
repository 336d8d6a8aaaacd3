"""Tour, stop and museum domain models.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph).
#
# A Tour owns an ordered list of Stops; a Stop always belongs to exactly
# one Tour (``tour_id``) and is deleted with it.  Multilingual fields are
# plain ``{lang: text}`` dicts.  All models are frozen; services derive
# updated copies with ``model_copy(update={...})`` and hand them back to
# the provider.
#
# Stop positioning stays a free-form dict because each positioning method
# (QR, GPS, BLE, NFC, ...) carries its own keys and the editors own that
# shape.  Only the QR form is produced server-side:
#     {"method": "qr_code", "url": "...?t=token", "shortCode": "ABC234"}
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, computed_field

from tourstack.models.base import LocalizedText, TourStackModel, utc_now
from tourstack.models.content import PositioningMethod, StopContent


class TourStatus(str, Enum):
    """Publishing lifecycle of a tour.  New tours always start as DRAFT."""

    DRAFT = "draft"
    REVIEW = "review"
    TESTING = "testing"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    PAUSED = "paused"
    ARCHIVED = "archived"


class Difficulty(str, Enum):
    ACCESSIBLE = "accessible"
    FAMILY = "family"
    GENERAL = "general"
    ACADEMIC = "academic"
    CHILDREN = "children"


class StopType(str, Enum):
    MANDATORY = "mandatory"
    OPTIONAL = "optional"
    BONUS = "bonus"
    SECRET = "secret"


class TourAccessibility(TourStackModel):
    wheelchair_accessible: bool = True
    audio_descriptions: bool = False
    sign_language: bool = False
    tactile_elements: bool = False
    quiet_space_friendly: bool = False


class Museum(TourStackModel):
    id: str
    name: str
    location: str | None = None
    logo: str | None = None
    branding: dict[str, Any] = Field(default_factory=dict)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class Stop(TourStackModel):
    """A point of interest inside a tour.

    ``content`` is also exposed as ``contentBlocks`` in API output, which
    is the name the stop editor reads.
    """

    id: str
    tour_id: str
    order: int = 0
    type: StopType = StopType.MANDATORY
    title: LocalizedText = Field(default_factory=lambda: {"en": "New Stop"})
    # A URL string, or an object such as {"url": ..., "alt": {...}}.
    image: str | dict[str, Any] = ""
    description: LocalizedText = Field(default_factory=lambda: {"en": ""})
    custom_field_values: dict[str, Any] = Field(default_factory=dict)
    primary_positioning: dict[str, Any] = Field(default_factory=dict)
    backup_positioning: dict[str, Any] | None = None
    triggers: dict[str, Any] = Field(
        default_factory=lambda: {"triggerOnEnter": True, "triggerOnExit": False}
    )
    content: list[StopContent] = Field(default_factory=list)
    interactive: dict[str, Any] | None = None
    links: list[dict[str, Any]] = Field(default_factory=list)
    accessibility: dict[str, Any] = Field(default_factory=dict)
    slug: str | None = None
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    @computed_field(alias="contentBlocks")  # type: ignore[prop-decorator]
    @property
    def content_blocks(self) -> list[StopContent]:
        return self.content

    @property
    def short_code(self) -> str | None:
        """QR short code from the primary positioning, if this stop has one."""
        positioning = self.primary_positioning or {}
        if positioning.get("method") != PositioningMethod.QR_CODE.value:
            return None
        code = positioning.get("shortCode")
        return code.upper() if code else None

    @property
    def slug_or_id(self) -> str:
        return self.slug or self.id


class Tour(TourStackModel):
    """A museum-authored sequence of stops with multilingual metadata."""

    id: str
    museum_id: str
    template_id: str
    status: TourStatus = TourStatus.DRAFT
    title: LocalizedText = Field(default_factory=lambda: {"en": "Untitled Tour"})
    hero_image: str = ""
    description: LocalizedText = Field(default_factory=lambda: {"en": ""})
    languages: list[str] = Field(default_factory=lambda: ["en"])
    primary_language: str = "en"
    duration: int = 30
    difficulty: Difficulty = Difficulty.GENERAL
    primary_positioning_method: PositioningMethod = PositioningMethod.QR_CODE
    backup_positioning_method: PositioningMethod | None = None
    accessibility: TourAccessibility = Field(default_factory=TourAccessibility)
    published_at: str | None = None
    scheduled_publish_at: str | None = None
    version: int = 1
    slug: str | None = None

    # Per-tour concierge overrides.
    concierge_enabled: bool = False
    concierge_persona: str | None = None
    concierge_welcome: LocalizedText | None = None
    concierge_collections: list[str] = Field(default_factory=list)
    concierge_quick_actions: list[dict[str, Any]] = Field(default_factory=list)

    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    # Populated by providers when the tour is loaded with its stops.
    stops: list[Stop] = Field(default_factory=list)

    @property
    def slug_or_id(self) -> str:
        return self.slug or self.id


def with_primary_language(languages: list[str], primary_language: str) -> list[str]:
    """Return *languages* with *primary_language* appended if it is missing."""
    if primary_language in languages:
        return list(languages)
    return [*languages, primary_language]
