"""Public interface definitions for persistence and external service providers.

Every database table family and every external API is accessed through
the abstract base classes defined in this package.  Concrete adapters
implement them and are wired together in ``tourstack/main.py``; unit
tests inject mocks instead.

CONCRETE PROVIDER MAP:
    Interface                 →  Concrete implementations (tourstack/providers/)
    ─────────────────────────────────────────────────────────────────────
    ITourProvider             →  SQLiteTourProvider
    IMediaProvider            →  SQLiteMediaProvider
    ICollectionProvider       →  SQLiteCollectionProvider
    IConciergeProvider        →  SQLiteConciergeProvider
    ISettingsProvider         →  JSONSettingsProvider
    ILLMProvider              →  GeminiLLMProvider
    IVisionProvider           →  GoogleVisionProvider
    ITranslationProvider      →  LibreTranslateProvider, MockTranslationProvider,
                                 GoogleTranslateProvider
    ITranscriptionProvider    →  DeepgramTranscriptionProvider,
                                 WhisperTranscriptionProvider
    ICacheProvider            →  MemoryCacheProvider
"""

from tourstack.interfaces.cache_provider import ICacheProvider
from tourstack.interfaces.concierge_provider import IConciergeProvider
from tourstack.interfaces.llm_provider import ILLMProvider
from tourstack.interfaces.media_provider import ICollectionProvider, IMediaProvider
from tourstack.interfaces.settings_provider import ISettingsProvider
from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.interfaces.transcription_provider import ITranscriptionProvider
from tourstack.interfaces.translation_provider import ITranslationProvider
from tourstack.interfaces.vision_provider import IVisionProvider

__all__ = [
    "ICacheProvider",
    "ICollectionProvider",
    "IConciergeProvider",
    "ILLMProvider",
    "IMediaProvider",
    "ISettingsProvider",
    "ITourProvider",
    "ITranscriptionProvider",
    "ITranslationProvider",
    "IVisionProvider",
]
