"""TourStack domain models — re-exports all public model classes.

    - base.py      — camelCase-aliased frozen base model, timestamps
    - content.py   — content-block tagged union and positioning methods
    - tour.py      — Museum, Tour, Stop and their enums
    - template.py  — positioning templates and custom stop fields
    - media.py     — media library items and collections
    - concierge.py — AI concierge config, knowledge sources, quick actions
"""

from __future__ import annotations

from tourstack.models.base import LocalizedText, TourStackModel, utc_now
from tourstack.models.concierge import (
    ConciergeConfig,
    KnowledgeSource,
    QuickAction,
)
from tourstack.models.content import (
    BLOCK_TYPES,
    ContentBlock,
    PositioningMethod,
    StopContent,
    StoredBlock,
    dump_content_blocks,
    parse_content_blocks,
    parse_stop_content,
)
from tourstack.models.media import Collection, Media
from tourstack.models.template import CustomField, Template
from tourstack.models.tour import (
    Difficulty,
    Museum,
    Stop,
    StopType,
    Tour,
    TourAccessibility,
    TourStatus,
    with_primary_language,
)

__all__ = [
    "BLOCK_TYPES",
    "Collection",
    "ConciergeConfig",
    "ContentBlock",
    "CustomField",
    "Difficulty",
    "KnowledgeSource",
    "LocalizedText",
    "Media",
    "Museum",
    "PositioningMethod",
    "QuickAction",
    "Stop",
    "StopContent",
    "StopType",
    "StoredBlock",
    "Template",
    "Tour",
    "TourAccessibility",
    "TourStackModel",
    "TourStatus",
    "dump_content_blocks",
    "parse_content_blocks",
    "parse_stop_content",
    "utc_now",
    "with_primary_language",
]
