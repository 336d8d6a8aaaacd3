"""TourStack FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and serves uploaded files under ``/uploads``.

# ─── COMPONENT GRAPH ──────────────────────────────────────────────────
#
#   httpx.AsyncClient ──┬── GeminiLLMProvider ──────┬── ConciergeService
#                       ├── GoogleVisionProvider    ├── ChatService
#                       ├── GoogleTranslateProvider ┴── ImageAnalysisService
#                       ├── LibreTranslateProvider ──── TranslationService
#                       └── Deepgram / Whisper ──────── TranscriptionService
#
#   SQLite (DATABASE_PATH)
#     ├── SQLiteTourProvider ──────── Tour / Stop / Visitor / Template /
#     │                               Feed services, SlugMigration
#     ├── SQLiteMediaProvider ─────── MediaService
#     ├── SQLiteCollectionProvider ── CollectionService
#     └── SQLiteConciergeProvider ─── ConciergeService
#
#   data/settings.json ── JSONSettingsProvider
#
# Every component is stored on ``app.state`` by the lifespan and read by
# ``tourstack.api.dependencies``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from tourstack.api.auth import AdminAuthMiddleware, SessionManager
from tourstack.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_exception_handlers,
)
from tourstack.api.routes import ALL_ROUTERS
from tourstack.config.loader import load_config
from tourstack.config.settings import Settings
from tourstack.interfaces.translation_provider import ITranslationProvider
from tourstack.providers.cache.memory_cache import MemoryCacheProvider
from tourstack.providers.llm.gemini_provider import GeminiLLMProvider
from tourstack.providers.settings.json_settings_provider import JSONSettingsProvider
from tourstack.providers.storage.sqlite_concierge_provider import SQLiteConciergeProvider
from tourstack.providers.storage.sqlite_media_provider import (
    SQLiteCollectionProvider,
    SQLiteMediaProvider,
)
from tourstack.providers.storage.sqlite_tour_provider import SQLiteTourProvider
from tourstack.providers.transcription.deepgram_provider import DeepgramTranscriptionProvider
from tourstack.providers.transcription.whisper_provider import WhisperTranscriptionProvider
from tourstack.providers.translation.google_translate_provider import GoogleTranslateProvider
from tourstack.providers.translation.libretranslate_provider import LibreTranslateProvider
from tourstack.providers.translation.mock_translation_provider import MockTranslationProvider
from tourstack.providers.vision.google_vision_provider import GoogleVisionProvider
from tourstack.services.chat_service import ChatService
from tourstack.services.collection_service import CollectionService
from tourstack.services.concierge_service import ConciergeService
from tourstack.services.feed_service import FeedService
from tourstack.services.image_analysis_service import ImageAnalysisService
from tourstack.services.media_service import MediaService
from tourstack.services.stop_service import StopService
from tourstack.services.template_service import TemplateService
from tourstack.services.tour_service import TourService
from tourstack.services.transcription_service import TranscriptionService
from tourstack.services.translation_service import TranslationService
from tourstack.services.visitor_service import VisitorService
from tourstack.utils.logging import configure_logging, get_logger

APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=settings.is_production,
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component construction
# ---------------------------------------------------------------------------


def _build_libre_translate(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    cache: MemoryCacheProvider,
) -> ITranslationProvider:
    if app_settings.libre_translate_url.strip().lower() == "mock":
        _logger.info("translation_mock_enabled")
        return MockTranslationProvider()
    return LibreTranslateProvider(
        url=app_settings.libre_translate_url,
        api_key=app_settings.libre_translate_api_key,
        http_client=http_client,
        cache=cache,
    )


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    storage_cfg = app_config.get("storage", {})
    uploads_cfg = app_config.get("uploads", {})
    translation_cfg = app_config.get("translation", {})

    db_path = storage_cfg.get("database_path", app_settings.database_path)
    uploads_dir = storage_cfg.get("uploads_dir", app_settings.uploads_dir)

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=30.0)
    cache = MemoryCacheProvider(
        max_size=translation_cfg.get("cache_max_size", 256),
        ttl=translation_cfg.get("cache_ttl_seconds", 3600),
    )

    # -- Storage --
    tour_store = SQLiteTourProvider(db_path=db_path)
    media_store = SQLiteMediaProvider(db_path=db_path)
    collection_store = SQLiteCollectionProvider(db_path=db_path)
    concierge_store = SQLiteConciergeProvider(db_path=db_path)
    settings_store = JSONSettingsProvider(
        storage_cfg.get("settings_path", app_settings.settings_path), app_settings
    )

    # -- External APIs --
    llm = GeminiLLMProvider(app_settings, http_client)
    vision = GoogleVisionProvider(app_settings.google_vision_api_key, http_client)
    google_translate = GoogleTranslateProvider(app_settings.translate_api_key, http_client, cache=cache)
    libre_translate = _build_libre_translate(app_settings, http_client, cache)
    deepgram = DeepgramTranscriptionProvider(app_settings.deepgram_api_key, http_client)
    whisper = WhisperTranscriptionProvider(app_settings.whisper_endpoint, http_client)

    # -- Services --
    return {
        "settings": app_settings,
        "http_client": http_client,
        "cache": cache,
        "session_manager": SessionManager(app_settings),
        "tour_store": tour_store,
        "media_store": media_store,
        "collection_store": collection_store,
        "concierge_store": concierge_store,
        "settings_store": settings_store,
        "tour_service": TourService(tour_store),
        "stop_service": StopService(tour_store),
        "visitor_service": VisitorService(tour_store),
        "template_service": TemplateService(tour_store),
        "feed_service": FeedService(tour_store),
        "media_service": MediaService(
            media_store,
            tour_store,
            uploads_dir=uploads_dir,
            max_file_size_mb=uploads_cfg.get("max_file_size_mb", 100),
            allowed_mime_types=uploads_cfg.get("allowed_mime_types", ()),
        ),
        "collection_service": CollectionService(collection_store, media_store),
        "concierge_service": ConciergeService(
            concierge_store, collection_store, llm, google_translate, config=app_config
        ),
        "chat_service": ChatService(
            llm,
            google_translate,
            knowledge_dir=storage_cfg.get("knowledge_dir", app_settings.knowledge_dir),
        ),
        "image_analysis_service": ImageAnalysisService(llm, vision),
        "translation_service": TranslationService(libre_translate, google_translate),
        "transcription_service": TranscriptionService(
            deepgram, whisper, whisper_endpoint=app_settings.whisper_endpoint
        ),
    }


async def initialize_storage(components: dict[str, Any]) -> None:
    """Create tables and seed the built-in templates when none exist."""
    for key in ("tour_store", "media_store", "collection_store", "concierge_store"):
        await components[key].initialize()
    templates: TemplateService = components["template_service"]
    if not await templates.list_templates():
        created = await templates.seed_built_in()
        _logger.info("templates_seeded", count=created)


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    overrides: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    *overrides* replaces named components after they are built; tests use
    it to swap in mocked AI providers.
    """
    app_settings = app_settings or settings
    app_config = load_config(settings=app_settings)

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Initialise all providers and services on startup, clean up on shutdown."""
        components = _build_all(app_settings, app_config)
        components.update(overrides or {})

        for key, value in components.items():
            setattr(application.state, key, value)

        await initialize_storage(components)

        _logger.info(
            "app_startup",
            version=APP_VERSION,
            environment=app_settings.app_env,
            services=app_config.get("services", {}).get("configured", []),
        )

        yield

        # -- Shutdown: close shared httpx client --
        http_client: httpx.AsyncClient = components["http_client"]
        await http_client.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")

    application = FastAPI(
        title="TourStack API",
        version=APP_VERSION,
        description=(
            "Museum tour authoring backend: tours, stops with QR positioning, "
            "media library, collections, and an AI concierge for visitors."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(AdminAuthMiddleware)
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.get_cors_origins())
    register_exception_handlers(application)

    # -- API routes --
    for router in ALL_ROUTERS:
        application.include_router(router)

    # -- Uploaded files --
    uploads_dir = Path(app_config.get("storage", {}).get("uploads_dir", app_settings.uploads_dir))
    application.mount(
        "/uploads",
        StaticFiles(directory=str(uploads_dir), check_dir=False),
        name="uploads",
    )

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "tourstack.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
