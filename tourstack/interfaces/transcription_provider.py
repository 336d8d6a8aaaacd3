"""Abstract base class for speech-to-text providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


# Concrete implementations: DeepgramTranscriptionProvider, WhisperTranscriptionProvider
# (tourstack/providers/transcription/)
class ITranscriptionProvider(ABC):
    """Contract for audio transcription services."""

    @abstractmethod
    async def transcribe(
        self,
        audio: bytes,
        mime_type: str,
        language: str | None = None,
        model: str | None = None,
    ) -> dict[str, Any]:
        """Transcribe an audio clip.

        Returns
        -------
        dict
            ``{text, confidence, words, duration, provider, model, language}``.

        Raises
        ------
        tourstack.utils.errors.LLMResponseParseError
            If the service returned no transcript; the raw payload is attached.
        tourstack.utils.errors.UpstreamError
            If the service answers with an error status.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""
