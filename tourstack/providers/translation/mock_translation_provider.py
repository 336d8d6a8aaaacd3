"""Offline translation stand-in selected with ``LIBRE_TRANSLATE_URL=mock``.

Prefixes the text with the upper-cased target code (``[FR] Hello``) so
translated UI paths can be exercised without a translation server.
"""

from __future__ import annotations

from typing import Any

from tourstack.interfaces.translation_provider import ITranslationProvider

_LANGUAGES = ["en", "es", "fr", "de", "it", "pt", "zh", "ja", "ko"]


class MockTranslationProvider(ITranslationProvider):
    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
        api_key: str | None = None,
    ) -> dict[str, Any]:
        return {"translatedText": f"[{target_lang.upper()}] {text}", "mock": True}

    async def get_languages(self) -> list[dict[str, Any]]:
        return [{"code": code, "name": code.upper(), "targets": _LANGUAGES} for code in _LANGUAGES]

    def get_provider_name(self) -> str:
        return "mock"

    def is_available(self) -> bool:
        return True
