"""Abstract base class for image-annotation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


# Concrete implementation: GoogleVisionProvider (tourstack/providers/vision/)
class IVisionProvider(ABC):
    """Contract for label/web/text detection on a base64 image."""

    @abstractmethod
    async def annotate(self, image_base64: str, features: list[str]) -> dict[str, Any]:
        """Run the requested feature detectors and return the first response.

        Raises
        ------
        tourstack.utils.errors.UpstreamError
            If the service answers with an error status or an error payload.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured."""
