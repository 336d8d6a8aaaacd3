"""Pydantic request/response schemas for the TourStack API.

# ─── HOW REQUEST SCHEMAS WORK ─────────────────────────────────────────
#
# The SPAs send camelCase JSON.  Every request schema extends
# ``CamelSchema`` so it accepts ``heroImage`` (or ``hero_image``) and
# routes hand services a snake_case dict via
#
#     body.model_dump(exclude_unset=True)
#
# ``exclude_unset`` is what makes PUT partial: keys the client did not
# send never reach the service.  Fields are optional even where the
# operation needs them so services can answer with their own 400
# messages ("Missing required fields", "Config ID required", ...).
#
# Nested structures (positioning, triggers, content blocks) stay loose
# dicts here and are validated by the domain models in the service.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Generic responses
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    details: Any | None = None


class SuccessResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    timestamp: str


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(CamelSchema):
    password: str | None = None


# ---------------------------------------------------------------------------
# Tours and stops
# ---------------------------------------------------------------------------


class _StopFields(CamelSchema):
    type: str | None = None
    title: dict[str, str] | None = None
    image: str | dict[str, Any] | None = None
    description: dict[str, str] | None = None
    custom_field_values: dict[str, Any] | None = None
    primary_positioning: dict[str, Any] | None = None
    backup_positioning: dict[str, Any] | None = None
    triggers: dict[str, Any] | None = None
    content: list[dict[str, Any]] | None = None
    content_blocks: list[dict[str, Any]] | None = None
    interactive: dict[str, Any] | None = None
    links: list[dict[str, Any]] | None = None
    accessibility: dict[str, Any] | None = None


class StopCreateRequest(_StopFields):
    tour_id: str | None = None


class StopUpdateRequest(_StopFields):
    id: str | None = None
    order: int | None = None


class ReorderStopsRequest(CamelSchema):
    stop_ids: list[str] = Field(default_factory=list)


class RegenerateQRRequest(CamelSchema):
    regenerate_short_code: bool = False


class _TourFields(CamelSchema):
    template_id: str | None = None
    title: dict[str, str] | None = None
    hero_image: str | None = None
    description: dict[str, str] | None = None
    languages: list[str] | None = None
    primary_language: str | None = None
    duration: int | None = None
    difficulty: str | None = None
    primary_positioning_method: str | None = None
    backup_positioning_method: str | None = None
    accessibility: dict[str, Any] | None = None
    published_at: str | None = None
    scheduled_publish_at: str | None = None
    concierge_enabled: bool | None = None
    concierge_persona: str | None = None
    concierge_welcome: dict[str, str] | None = None
    concierge_collections: list[str] | None = None
    concierge_quick_actions: list[dict[str, Any]] | None = None


class TourCreateRequest(_TourFields):
    pass


class TourUpdateRequest(_TourFields):
    status: str | None = None
    stops: list[StopUpdateRequest] | None = None


# ---------------------------------------------------------------------------
# Media and collections
# ---------------------------------------------------------------------------


class MediaUpdateRequest(CamelSchema):
    alt: str | None = None
    caption: str | None = None
    tags: list[str] | None = None


class BulkIdsRequest(CamelSchema):
    ids: list[str] = Field(default_factory=list)


class BulkTagsRequest(CamelSchema):
    ids: list[str] = Field(default_factory=list)
    tags: list[str] | None = None
    mode: str = "add"


class CollectionRequest(CamelSchema):
    museum_id: str | None = None
    name: str | None = None
    description: str | None = None
    type: str | None = None
    items: list[dict[str, Any]] | None = None
    source_language: str | None = None
    texts: dict[str, Any] | None = None
    tts_settings: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Concierge and chat
# ---------------------------------------------------------------------------


class ConciergeConfigUpdateRequest(CamelSchema):
    id: str | None = None
    enabled: bool | None = None
    persona: str | None = None
    custom_persona: str | None = None
    welcome_message: dict[str, str] | None = None
    enabled_languages: list[str] | None = None


class KnowledgeCreateRequest(CamelSchema):
    config_id: str | None = None
    source_type: str | None = None
    source_id: str | None = None
    title: str | None = None
    content: str | None = None
    priority: int | None = None


class ConfigIdRequest(CamelSchema):
    config_id: str | None = None


class ToggleRequest(CamelSchema):
    enabled: bool = True


class QuickActionRequest(CamelSchema):
    config_id: str | None = None
    question: dict[str, str] | None = None
    category: str | None = None
    icon: str | None = None
    enabled: bool | None = None
    order: int | None = None


class QuickActionOrder(CamelSchema):
    id: str
    order: int


class QuickActionReorderRequest(CamelSchema):
    actions: list[QuickActionOrder] | None = None


class MessageRequest(CamelSchema):
    message: str | None = None
    language: str | None = None


# ---------------------------------------------------------------------------
# AI proxies
# ---------------------------------------------------------------------------


class ImageAnalysisRequest(CamelSchema):
    image: str | None = None


class VisionRequest(CamelSchema):
    image: str | None = None
    features: list[str] = Field(default_factory=list)


class TranslateRequest(CamelSchema):
    text: str | None = None
    source_lang: str | None = None
    target_lang: str | None = None
    api_key: str | None = None


class GoogleTranslateRequest(CamelSchema):
    text: str | None = None
    source_lang: str | None = None
    target_lang: str | None = None
    text_format: str = Field(default="text", alias="format")


class GoogleBatchTranslateRequest(CamelSchema):
    texts: list[str] | None = None
    source_lang: str | None = None
    target_lang: str | None = None
    text_format: str = Field(default="text", alias="format")


class DetectRequest(CamelSchema):
    text: str | None = None
