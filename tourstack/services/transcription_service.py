"""Speech-to-text dispatch between Deepgram and a self-hosted Whisper server."""

from __future__ import annotations

from typing import Any

from tourstack.interfaces.transcription_provider import ITranscriptionProvider
from tourstack.providers.transcription.deepgram_provider import LISTEN_URL
from tourstack.utils.errors import ValidationError

DEFAULT_PROVIDER = "deepgram"


class TranscriptionService:
    def __init__(
        self,
        deepgram: ITranscriptionProvider,
        whisper: ITranscriptionProvider,
        whisper_endpoint: str = "",
    ) -> None:
        self._providers = {"deepgram": deepgram, "whisper": whisper}
        self._whisper_endpoint = whisper_endpoint

    async def transcribe(
        self,
        audio: bytes | None,
        mime_type: str,
        provider: str | None = None,
        language: str | None = None,
        model: str | None = None,
    ) -> dict[str, Any]:
        if not audio:
            raise ValidationError(message="No audio file uploaded")
        name = provider or DEFAULT_PROVIDER
        engine = self._providers.get(name)
        if engine is None:
            raise ValidationError(message=f"Unknown provider: {name}")
        return await engine.transcribe(audio, mime_type, language=language, model=model)

    def status(self) -> dict[str, Any]:
        return {
            "deepgram": {
                "configured": self._providers["deepgram"].is_available(),
                "endpoint": LISTEN_URL,
            },
            "whisper": {
                "configured": self._providers["whisper"].is_available(),
                "endpoint": self._whisper_endpoint or None,
            },
        }
