"""Abstract base class for LLM service providers.

Defines the contract for the large-language-model backend behind image
analysis, the concierge preview and the visitor chat.  The concrete
implementation wraps Gemini's REST API; tests inject mocks.
"""

from __future__ import annotations

# ABC = Abstract Base Class — Python's way of defining interfaces.
# If a concrete class forgets an abstractmethod, instantiation raises TypeError.
from abc import ABC, abstractmethod
from typing import Any


# Concrete implementation: GeminiLLMProvider (tourstack/providers/llm/)
class ILLMProvider(ABC):
    """Contract for LLM services used by the concierge, chat and media analysis."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a single-turn text completion.

        Returns
        -------
        str
            The model's text, or ``""`` when the model returned no text.

        Raises
        ------
        tourstack.utils.errors.LLMError
            If the API call fails.
        """

    @abstractmethod
    async def chat(
        self,
        messages: list[tuple[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a reply to a multi-turn conversation.

        Parameters
        ----------
        messages:
            ``(role, text)`` pairs where role is ``"user"`` or ``"model"``.
        """

    @abstractmethod
    async def analyze_image_json(self, image_bytes: bytes, prompt: str) -> dict[str, Any]:
        """Analyse an image in JSON response mode and return the parsed object.

        Raises
        ------
        tourstack.utils.errors.LLMResponseParseError
            If the reply is not valid JSON; the raw text is attached.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"gemini"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured (no network call)."""
