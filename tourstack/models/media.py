"""Media library and collection models."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from tourstack.models.base import TourStackModel, utc_now


class Media(TourStackModel):
    """An uploaded file in the media library.

    ``url`` is the public path (``/uploads/images/<uuid>.png``) and is the
    key tours, stops and collection items reference the file by.
    """

    id: str
    filename: str
    mime_type: str
    size: int
    url: str
    width: int | None = None
    height: int | None = None
    duration: float | None = None
    alt: str | None = None
    caption: str | None = None
    tags: list[str] = Field(default_factory=list)
    ai_metadata: dict[str, Any] | None = None
    ai_translations: dict[str, Any] | None = None
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class Collection(TourStackModel):
    """A curated group of items (gallery images, documents, audio clips).

    Items are loose dicts because each collection type stores its own
    shape; every item carries at least ``id`` and ``order``.
    """

    id: str
    museum_id: str | None = None
    name: str
    description: str = ""
    type: str = "gallery"
    items: list[dict[str, Any]] = Field(default_factory=list)
    source_language: str | None = None
    texts: dict[str, Any] | None = None
    tts_settings: dict[str, Any] | None = None
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)
