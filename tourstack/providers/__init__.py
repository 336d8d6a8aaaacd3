"""Concrete adapters for the interfaces in ``tourstack.interfaces``.

Subpackages group adapters by concern: storage (SQLite), settings (JSON
file), llm (Gemini), vision (Google Vision), translation (LibreTranslate,
Google Translate), transcription (Deepgram, Whisper) and cache
(cachetools).  All network adapters share the ``httpx.AsyncClient``
created in the application lifespan.
"""
