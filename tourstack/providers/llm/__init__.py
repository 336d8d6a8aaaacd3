"""LLM providers.

GeminiLLMProvider backs image analysis, the concierge preview and the
public visitor chat.  Swapping models is a settings change
(``GEMINI_MODEL``); swapping vendors means a new ILLMProvider adapter.
"""

from tourstack.providers.llm.gemini_provider import GeminiLLMProvider

__all__ = ["GeminiLLMProvider"]
