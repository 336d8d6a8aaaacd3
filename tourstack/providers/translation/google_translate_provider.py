"""Google Cloud Translation (v2, API-key auth) provider adapter.

# ─── ERROR SHAPE ─────────────────────────────────────────────────────
#
# The v2 API reports failures in the body as
#     {"error": {"code": 400, "message": "...", "status": "..."}}
# sometimes with a 200 transport status.  Every call therefore checks
# the body, and a present ``error`` becomes an UpstreamError carrying
# ``error.code`` as the HTTP status and the whole error object as
# ``details``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from tourstack.interfaces.cache_provider import ICacheProvider
from tourstack.interfaces.translation_provider import ITranslationProvider
from tourstack.utils.errors import (
    ConfigurationError,
    ProviderUnavailableError,
    UpstreamError,
)

logger = structlog.get_logger(logger_name=__name__)

_API_URL = "https://translation.googleapis.com/language/translate/v2"
_REFERER = "http://localhost:3000"


class GoogleTranslateProvider(ITranslationProvider):
    """Translation, batch translation and detection via Google Translate v2."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        cache: ICacheProvider | None = None,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._cache = cache

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        text_format: str = "text",
    ) -> dict[str, Any]:
        translations = await self.translate_batch([text], target_lang, source_lang, text_format)
        if not translations:
            raise UpstreamError(
                message="No translation returned",
                provider_name=self.get_provider_name(),
                status_code=500,
            )
        return {**translations[0], "provider": "google"}

    async def translate_batch(
        self,
        texts: list[str],
        target_lang: str,
        source_lang: str | None = None,
        text_format: str = "text",
    ) -> list[dict[str, Any]]:
        """Translate several strings in one request, preserving order."""
        body: dict[str, Any] = {
            "q": texts if len(texts) > 1 else texts[0],
            "target": target_lang,
            "format": text_format,
        }
        if source_lang and source_lang != "auto":
            body["source"] = source_lang

        data = await self._request("POST", _API_URL, json=body)
        translations = (data.get("data") or {}).get("translations")
        if not translations:
            raise UpstreamError(
                message="No translations returned",
                provider_name=self.get_provider_name(),
                status_code=500,
            )
        logger.info("google_translate_completed", target=target_lang, count=len(translations))
        return [
            {
                "translatedText": t.get("translatedText", ""),
                "detectedSourceLanguage": t.get("detectedSourceLanguage"),
            }
            for t in translations
        ]

    async def detect(self, text: str) -> dict[str, Any]:
        """Return ``{language, confidence}`` for the most likely language."""
        data = await self._request("POST", f"{_API_URL}/detect", json={"q": text})
        detections = (data.get("data") or {}).get("detections") or []
        if not detections or not detections[0]:
            raise UpstreamError(
                message="No detection result",
                provider_name=self.get_provider_name(),
                status_code=500,
            )
        best = detections[0][0]
        return {"language": best.get("language"), "confidence": best.get("confidence")}

    async def get_languages(self, target: str = "en") -> list[dict[str, Any]]:
        cache_key = f"google_translate:languages:{target}"
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                return cached

        data = await self._request("GET", f"{_API_URL}/languages", params={"target": target})
        languages = (data.get("data") or {}).get("languages")
        if languages is None:
            raise UpstreamError(
                message="No languages returned",
                provider_name=self.get_provider_name(),
                status_code=500,
            )
        result = [
            {"code": lang["language"], "name": lang.get("name") or lang["language"]}
            for lang in languages
        ]
        if self._cache is not None:
            await self._cache.set(cache_key, result)
        return result

    async def status(self) -> dict[str, Any]:
        """Probe the API with a languages call; never raises."""
        if not self._api_key:
            return {"available": False, "reason": "Google Translate API key not configured"}
        try:
            languages = await self.get_languages("en")
        except UpstreamError as exc:
            return {"available": False, "reason": exc.message}
        except ProviderUnavailableError:
            return {"available": False, "reason": "Failed to connect to Google Translate API"}
        return {"available": True, "languageCount": len(languages)}

    def get_provider_name(self) -> str:
        return "google_translate"

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError(
                message="Server configuration error: Google API key not found.",
                provider_name=self.get_provider_name(),
            )
        params = {"key": self._api_key, **kwargs.pop("params", {})}
        try:
            response = await self._http.request(
                method, url, params=params, headers={"Referer": _REFERER}, **kwargs
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("google_translate_request_failed", error=str(exc))
            raise ProviderUnavailableError(
                message="Failed to connect to Google Translate API",
                provider_name=self.get_provider_name(),
            ) from exc

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            logger.error("google_translate_api_error", code=error.get("code"), message=error.get("message"))
            raise UpstreamError(
                message=error.get("message", "Google Translate error"),
                provider_name=self.get_provider_name(),
                status_code=error.get("code") or 500,
                details=error,
            )
        return data
