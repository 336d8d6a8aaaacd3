"""Machine translation providers.

    LibreTranslateProvider   /api/translate (self-hosted LibreTranslate)
    MockTranslationProvider  /api/translate when LIBRE_TRANSLATE_URL=mock
    GoogleTranslateProvider  /api/google-translate, concierge quick-action
                             translation and visitor chat replies
"""

from tourstack.providers.translation.google_translate_provider import GoogleTranslateProvider
from tourstack.providers.translation.libretranslate_provider import LibreTranslateProvider
from tourstack.providers.translation.mock_translation_provider import MockTranslationProvider

__all__ = [
    "GoogleTranslateProvider",
    "LibreTranslateProvider",
    "MockTranslationProvider",
]
