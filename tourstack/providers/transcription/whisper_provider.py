"""Self-hosted Whisper transcription provider.

Targets any server speaking the OpenAI-compatible form upload
(``file``, ``language``, ``response_format=json``), such as
whisper.cpp's ``/inference`` endpoint.  Configured with WHISPER_ENDPOINT.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from tourstack.interfaces.transcription_provider import ITranscriptionProvider
from tourstack.utils.errors import (
    ConfigurationError,
    ProviderUnavailableError,
    UpstreamError,
)

logger = structlog.get_logger(logger_name=__name__)


class WhisperTranscriptionProvider(ITranscriptionProvider):
    """Transcription via a self-hosted Whisper HTTP server."""

    def __init__(self, endpoint: str, http_client: httpx.AsyncClient) -> None:
        self._endpoint = endpoint
        self._http = http_client

    async def transcribe(
        self,
        audio: bytes,
        mime_type: str,
        language: str | None = None,
        model: str | None = None,
        filename: str = "audio.wav",
    ) -> dict[str, Any]:
        if not self._endpoint:
            raise ConfigurationError(
                message="Whisper endpoint not configured",
                provider_name=self.get_provider_name(),
            )
        language = language or "en"
        try:
            response = await self._http.post(
                self._endpoint,
                files={"file": (filename, audio, mime_type or "application/octet-stream")},
                data={"language": language, "response_format": "json"},
                timeout=300.0,
            )
        except httpx.HTTPError as exc:
            logger.error("whisper_request_failed", error=str(exc))
            raise ProviderUnavailableError(
                message="Transcription failed",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code >= 400:
            raise UpstreamError(
                message="Whisper transcription failed",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
                details=response.text,
            )

        data = response.json()
        logger.info("whisper_transcription_complete", language=language)
        return {
            "text": data.get("text") or "",
            "segments": data.get("segments"),
            "provider": "whisper",
            "language": language,
        }

    def get_provider_name(self) -> str:
        return "whisper"

    def is_available(self) -> bool:
        return bool(self._endpoint)
