"""Deepgram speech-to-text provider.

# ─── CLOUD TRANSCRIPTION ────────────────────────────────────────────
#
# Audio bytes are POSTed as the raw request body to
#     https://api.deepgram.com/v1/listen?model=nova-2&language=en&...
# with ``Authorization: Token <key>`` and the clip's own Content-Type.
#
# punctuate, utterances and smart_format are always on; the admin audio
# editors rely on the per-word timings in ``words`` to build captions.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from tourstack.interfaces.transcription_provider import ITranscriptionProvider
from tourstack.utils.errors import (
    ConfigurationError,
    LLMResponseParseError,
    ProviderUnavailableError,
    UpstreamError,
)

logger = structlog.get_logger(logger_name=__name__)

LISTEN_URL = "https://api.deepgram.com/v1/listen"
DEFAULT_MODEL = "nova-2"


class DeepgramTranscriptionProvider(ITranscriptionProvider):
    """Transcription via the Deepgram pre-recorded audio API."""

    def __init__(self, api_key: str, http_client: httpx.AsyncClient) -> None:
        self._api_key = api_key
        self._http = http_client

    async def transcribe(
        self,
        audio: bytes,
        mime_type: str,
        language: str | None = None,
        model: str | None = None,
    ) -> dict[str, Any]:
        if not self._api_key:
            raise ConfigurationError(
                message="Deepgram API key not configured",
                provider_name=self.get_provider_name(),
            )
        language = language or "en"
        model = model or DEFAULT_MODEL
        params = {
            "model": model,
            "language": language,
            "punctuate": "true",
            "utterances": "true",
            "smart_format": "true",
        }
        try:
            response = await self._http.post(
                LISTEN_URL,
                params=params,
                content=audio,
                headers={
                    "Authorization": f"Token {self._api_key}",
                    "Content-Type": mime_type or "application/octet-stream",
                },
                timeout=120.0,
            )
        except httpx.HTTPError as exc:
            logger.error("deepgram_request_failed", error=str(exc))
            raise ProviderUnavailableError(
                message="Transcription failed",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code >= 400:
            logger.error("deepgram_request_failed", status=response.status_code, body=response.text[:500])
            raise UpstreamError(
                message="Deepgram transcription failed",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
                details=response.text,
            )

        data = response.json()
        channels = (data.get("results") or {}).get("channels") or [{}]
        alternative = (channels[0].get("alternatives") or [{}])[0]
        transcript = alternative.get("transcript")
        if not transcript:
            raise LLMResponseParseError(
                message="No transcript returned from Deepgram",
                provider_name=self.get_provider_name(),
                raw=data,
            )

        duration = (data.get("metadata") or {}).get("duration")
        logger.info("deepgram_transcription_complete", model=model, language=language, duration=duration)
        return {
            "text": transcript,
            "confidence": alternative.get("confidence"),
            "words": alternative.get("words"),
            "duration": duration,
            "provider": "deepgram",
            "model": model,
            "language": language,
        }

    def get_provider_name(self) -> str:
        return "deepgram"

    def is_available(self) -> bool:
        return bool(self._api_key)
