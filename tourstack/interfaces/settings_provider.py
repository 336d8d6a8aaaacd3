"""Abstract base class for the application settings store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ISettingsProvider(ABC):
    """Contract for the sectioned settings document.

    Settings are a dict of sections (``maps``, ``positioning``,
    ``transcription``, ``translation``, ``general``), each a flat dict.
    """

    @abstractmethod
    async def get_all(self) -> dict[str, Any]:
        """Stored settings merged over defaults, with environment overrides applied."""

    @abstractmethod
    async def save_all(self, updates: dict[str, Any]) -> dict[str, Any]:
        """Replace the given top-level sections and return the resulting settings."""

    @abstractmethod
    async def update_section(self, section: str, updates: dict[str, Any]) -> dict[str, Any]:
        """Merge *updates* into one section and return the full settings.

        Raises
        ------
        tourstack.utils.errors.ValidationError
            If *section* is not a known section name.
        """
