"""FastAPI dependencies that resolve components from ``app.state``.

``main._build_all`` stores every service on ``app.state`` at startup.
Routes declare what they need with the ``Annotated`` aliases below:

    async def list_tours(tours: TourServiceDep) -> list[dict]: ...
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request

from tourstack.api.auth import SessionManager
from tourstack.config.settings import Settings
from tourstack.interfaces.settings_provider import ISettingsProvider
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


def _component(name: str):  # noqa: ANN202
    def _get(request: Request) -> Any:
        value = getattr(request.app.state, name, None)
        if value is None:
            raise HTTPException(status_code=503, detail="Service is starting up")
        return value

    return _get


def public_base_url(request: Request) -> str:
    """Base for generated visitor URLs: PUBLIC_BASE_URL, else the request origin."""
    app_settings: Settings | None = getattr(request.app.state, "settings", None)
    if app_settings is not None and app_settings.public_base_url:
        return app_settings.public_base_url.rstrip("/")
    return str(request.base_url).rstrip("/")


TourServiceDep = Annotated[TourService, Depends(_component("tour_service"))]
StopServiceDep = Annotated[StopService, Depends(_component("stop_service"))]
VisitorServiceDep = Annotated[VisitorService, Depends(_component("visitor_service"))]
TemplateServiceDep = Annotated[TemplateService, Depends(_component("template_service"))]
MediaServiceDep = Annotated[MediaService, Depends(_component("media_service"))]
CollectionServiceDep = Annotated[CollectionService, Depends(_component("collection_service"))]
ConciergeServiceDep = Annotated[ConciergeService, Depends(_component("concierge_service"))]
ChatServiceDep = Annotated[ChatService, Depends(_component("chat_service"))]
FeedServiceDep = Annotated[FeedService, Depends(_component("feed_service"))]
ImageAnalysisDep = Annotated[ImageAnalysisService, Depends(_component("image_analysis_service"))]
TranslationServiceDep = Annotated[TranslationService, Depends(_component("translation_service"))]
TranscriptionServiceDep = Annotated[TranscriptionService, Depends(_component("transcription_service"))]
SettingsStoreDep = Annotated[ISettingsProvider, Depends(_component("settings_store"))]
SessionManagerDep = Annotated[SessionManager, Depends(_component("session_manager"))]
BaseUrlDep = Annotated[str, Depends(public_base_url)]
