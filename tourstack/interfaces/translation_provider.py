"""Abstract base class for machine translation providers.

Two backends implement this contract: LibreTranslate (self-hostable,
also available as an offline mock) and Google Cloud Translation.  The
concierge and visitor chat use whichever is injected as their translator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ITranslationProvider(ABC):
    """Contract for text translation services."""

    @abstractmethod
    async def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: str | None = None,
    ) -> dict[str, Any]:
        """Translate *text*.

        Parameters
        ----------
        source_lang:
            Source language code; ``None`` lets the service detect it.

        Returns
        -------
        dict
            At least ``translatedText``; providers may add
            ``detectedSourceLanguage`` or ``mock``.

        Raises
        ------
        tourstack.utils.errors.UpstreamError
            If the service answers with an error status.
        tourstack.utils.errors.ProviderUnavailableError
            If the service cannot be reached.
        """

    @abstractmethod
    async def get_languages(self) -> list[dict[str, Any]]:
        """Supported languages as ``[{"code": ..., "name": ...}]``."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured."""
