"""Speech-to-text providers.

DeepgramTranscriptionProvider is the default; WhisperTranscriptionProvider
is selected per request with ``provider=whisper``.
"""

from tourstack.providers.transcription.deepgram_provider import DeepgramTranscriptionProvider
from tourstack.providers.transcription.whisper_provider import WhisperTranscriptionProvider

__all__ = ["DeepgramTranscriptionProvider", "WhisperTranscriptionProvider"]
