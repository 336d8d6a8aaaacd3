"""LibreTranslate provider adapter.

LibreTranslate is self-hostable; TourStack points at its own instance by
default.  ``LIBRE_TRANSLATE_URL`` is the full ``/translate`` endpoint and
the languages list is read from the sibling ``/languages`` endpoint.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from tourstack.interfaces.cache_provider import ICacheProvider
from tourstack.interfaces.translation_provider import ITranslationProvider
from tourstack.utils.errors import ProviderUnavailableError, UpstreamError

logger = structlog.get_logger(logger_name=__name__)

_LANGUAGES_CACHE_KEY = "libretranslate:languages"


class LibreTranslateProvider(ITranslationProvider):
    """Translation via a LibreTranslate server."""

    def __init__(
        self,
        url: str,
        api_key: str,
        http_client: httpx.AsyncClient,
        cache: ICacheProvider | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._http = http_client
        self._cache = cache

    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        api_key: str | None = None,
    ) -> dict[str, Any]:
        body: dict[str, str] = {
            "q": text,
            "source": source_lang or "auto",
            "target": target_lang,
            "format": "text",
        }
        key = api_key or self._api_key
        if key:
            body["api_key"] = key

        try:
            response = await self._http.post(self._url, json=body)
        except httpx.HTTPError as exc:
            logger.error("libretranslate_request_failed", error=str(exc))
            raise ProviderUnavailableError(
                message="Translation service unavailable",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code >= 400:
            logger.error(
                "libretranslate_request_failed",
                status=response.status_code,
                body=response.text[:500],
            )
            raise UpstreamError(
                message="Translation failed",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
                details=response.text,
            )
        return {"translatedText": response.json().get("translatedText", "")}

    async def get_languages(self) -> list[dict[str, Any]]:
        if self._cache is not None:
            cached = await self._cache.get(_LANGUAGES_CACHE_KEY)
            if cached is not None:
                return cached
        try:
            response = await self._http.get(self._languages_url())
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("libretranslate_languages_failed", error=str(exc))
            raise ProviderUnavailableError(
                message="Failed to fetch languages",
                provider_name=self.get_provider_name(),
            ) from exc
        languages = response.json()
        if self._cache is not None:
            await self._cache.set(_LANGUAGES_CACHE_KEY, languages)
        return languages

    def get_provider_name(self) -> str:
        return "libretranslate"

    def is_available(self) -> bool:
        return bool(self._url)

    def _languages_url(self) -> str:
        base = self._url.rstrip("/")
        if base.endswith("/translate"):
            base = base[: -len("/translate")]
        return f"{base}/languages"
