"""Google Cloud Vision provider adapter.

Wraps ``images:annotate`` for a single base64 image.  Every request asks
for LABEL_DETECTION and WEB_DETECTION on top of the caller's features so
the media panel always has labels and best-guess names to show.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from tourstack.interfaces.vision_provider import IVisionProvider
from tourstack.utils.errors import (
    ConfigurationError,
    ProviderUnavailableError,
    UpstreamError,
)

logger = structlog.get_logger(logger_name=__name__)

_ANNOTATE_URL = "https://vision.googleapis.com/v1/images:annotate"
_ALWAYS_FEATURES = ("LABEL_DETECTION", "WEB_DETECTION")
_MAX_RESULTS = 10
# Browser-restricted API keys reject server calls without an allowed Referer.
_REFERER = "http://localhost:3000"


class GoogleVisionProvider(IVisionProvider):
    """Image annotation via the Google Cloud Vision REST API."""

    def __init__(self, api_key: str, http_client: httpx.AsyncClient) -> None:
        self._api_key = api_key
        self._http = http_client

    async def annotate(self, image_base64: str, features: list[str]) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError(
                message="Server configuration error: Google Vision API key not found.",
                provider_name=self.get_provider_name(),
            )
        body = {
            "requests": [
                {
                    "image": {"content": image_base64},
                    "features": [
                        {"type": feature, "maxResults": _MAX_RESULTS}
                        for feature in [*features, *_ALWAYS_FEATURES]
                    ],
                }
            ]
        }
        try:
            response = await self._http.post(
                _ANNOTATE_URL,
                params={"key": self._api_key},
                json=body,
                headers={"Referer": _REFERER},
            )
        except httpx.HTTPError as exc:
            logger.error("vision_request_failed", error=str(exc))
            raise ProviderUnavailableError(
                message="Internal server error processing image",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code >= 400:
            details = _safe_json(response)
            message = (details.get("error") or {}).get("message") or "Unknown error"
            logger.error("vision_request_failed", status=response.status_code, message=message)
            raise UpstreamError(
                message=message,
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
                details=details,
            )

        result = (response.json().get("responses") or [{}])[0]
        if result.get("error"):
            raise UpstreamError(
                message=result["error"].get("message", "Vision analysis failed"),
                provider_name=self.get_provider_name(),
                status_code=400,
            )
        logger.info("vision_image_annotated", features=len(features) + len(_ALWAYS_FEATURES))
        return result

    def get_provider_name(self) -> str:
        return "google_vision"

    def is_available(self) -> bool:
        return bool(self._api_key)


def _safe_json(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {"error": {"message": response.text}}
    return data if isinstance(data, dict) else {"error": {"message": str(data)}}
