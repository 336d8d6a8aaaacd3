"""Translation front door for the admin editor.

Two engines are exposed: LibreTranslate (self-hosted, used by the
"magic translate" buttons) and Google Translate (batch, detection and
the concierge/chat paths).  Request validation lives here so the routes
only shape HTTP.
"""

from __future__ import annotations

from typing import Any

from tourstack.interfaces.translation_provider import ITranslationProvider
from tourstack.providers.translation.google_translate_provider import GoogleTranslateProvider
from tourstack.utils.errors import ValidationError


class TranslationService:
    def __init__(self, libre: ITranslationProvider, google: GoogleTranslateProvider) -> None:
        self._libre = libre
        self._google = google

    # ── LibreTranslate ─────────────────────────────────────────────────

    async def translate(
        self,
        text: str | None,
        source_lang: str | None,
        target_lang: str | None,
        api_key: str | None = None,
    ) -> dict[str, Any]:
        if not text or not source_lang or not target_lang:
            raise ValidationError(message="Missing required fields: text, sourceLang, targetLang")
        if source_lang == target_lang:
            return {"translatedText": text}
        return await self._libre.translate(text, target_lang, source_lang, api_key=api_key)

    async def languages(self) -> list[dict[str, Any]]:
        return await self._libre.get_languages()

    # ── Google Translate ───────────────────────────────────────────────

    async def google_translate(
        self,
        text: str | None,
        target_lang: str | None,
        source_lang: str | None = None,
        text_format: str = "text",
    ) -> dict[str, Any]:
        if not text:
            raise ValidationError(message="Text is required")
        if not target_lang:
            raise ValidationError(message="Target language is required")
        return await self._google.translate(text, target_lang, source_lang, text_format)

    async def google_translate_batch(
        self,
        texts: list[str] | None,
        target_lang: str | None,
        source_lang: str | None = None,
        text_format: str = "text",
    ) -> dict[str, Any]:
        if not texts:
            raise ValidationError(message="Texts array is required")
        if not target_lang:
            raise ValidationError(message="Target language is required")
        translations = await self._google.translate_batch(texts, target_lang, source_lang, text_format)
        return {"translations": translations, "provider": "google"}

    async def google_detect(self, text: str | None) -> dict[str, Any]:
        if not text:
            raise ValidationError(message="Text is required")
        return await self._google.detect(text)

    async def google_languages(self, target: str = "en") -> dict[str, Any]:
        return {"languages": await self._google.get_languages(target)}

    async def google_status(self) -> dict[str, Any]:
        return await self._google.status()
