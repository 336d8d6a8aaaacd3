"""Gemini LLM provider adapter.

Talks to the Generative Language REST API directly over the shared
``httpx.AsyncClient``:

    POST https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent?key=...

Request bodies use Gemini's ``contents``/``parts`` shape.  Images travel
as ``inlineData`` parts with a MIME type sniffed from magic bytes, and
JSON mode is requested with ``generationConfig.responseMimeType``.

Key differences from chat-completion style APIs:
    - Roles are ``user`` and ``model``; there is no system role, so callers
      put instructions in the first user turn
    - A reply may be split across several text parts, which are joined
    - A blocked or empty candidate yields no parts at all; that maps to ""
"""

from __future__ import annotations

import base64
import json
from typing import Any

import httpx
import structlog

from tourstack.config.settings import Settings
from tourstack.interfaces.llm_provider import ILLMProvider
from tourstack.utils.errors import (
    ConfigurationError,
    LLMError,
    LLMResponseParseError,
    RateLimitError,
)

logger = structlog.get_logger(logger_name=__name__)

_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


def _detect_media_type(image_bytes: bytes) -> str:
    """Detect the MIME type of an image from its magic bytes."""
    if image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if image_bytes[:2] == b"\xff\xd8":
        return "image/jpeg"
    return "image/jpeg"  # safe fallback


class GeminiLLMProvider(ILLMProvider):
    """LLM provider backed by Google's Gemini REST API.

    Uses ``gemini-2.0-flash`` unless ``GEMINI_MODEL`` says otherwise.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._api_key = settings.gemini_api_key
        self._model = settings.gemini_model
        self._http = http_client

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> str:
        return await self.chat([("user", prompt)], temperature=temperature, max_tokens=max_tokens)

    async def chat(
        self,
        messages: list[tuple[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> str:
        body = {
            "contents": [
                {"role": role, "parts": [{"text": text}]} for role, text in messages
            ],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        data = await self._generate(body)
        text = self._extract_text(data)
        logger.info("gemini_completion", model=self._model, turns=len(messages), chars=len(text))
        return text

    async def analyze_image_json(self, image_bytes: bytes, prompt: str) -> dict[str, Any]:
        body = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": prompt},
                        {
                            "inlineData": {
                                "mimeType": _detect_media_type(image_bytes),
                                "data": base64.b64encode(image_bytes).decode("ascii"),
                            }
                        },
                    ],
                }
            ],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        data = await self._generate(body)
        text = self._extract_text(data)
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("gemini_json_parse_failed", model=self._model, chars=len(text))
            raise LLMResponseParseError(provider_name=self.get_provider_name(), raw=text) from exc
        if not isinstance(parsed, dict):
            raise LLMResponseParseError(provider_name=self.get_provider_name(), raw=text)
        logger.info("gemini_image_analyzed", model=self._model)
        return parsed

    def get_provider_name(self) -> str:
        return "gemini"

    def is_available(self) -> bool:
        return bool(self._api_key)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _generate(self, body: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError(
                message="Server configuration error: Gemini API Key missing",
                provider_name=self.get_provider_name(),
            )
        url = f"{_API_BASE}/{self._model}:generateContent"
        try:
            response = await self._http.post(url, params={"key": self._api_key}, json=body)
        except httpx.HTTPError as exc:
            logger.error("gemini_request_failed", model=self._model, error=str(exc))
            raise LLMError(
                message=f"Gemini request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code == 429:
            raise RateLimitError(provider_name=self.get_provider_name())
        if response.status_code >= 400:
            logger.error(
                "gemini_request_failed",
                model=self._model,
                status=response.status_code,
                body=response.text[:500],
            )
            raise LLMError(
                message=f"Gemini API error: {response.status_code}",
                provider_name=self.get_provider_name(),
            )
        return response.json()

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)
