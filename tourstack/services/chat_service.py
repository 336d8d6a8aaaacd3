"""Public visitor chat grounded in plain-text knowledge files.

Every ``*.txt`` file in the knowledge directory (``uploads/knowledge``)
is read on each request and pasted into the system turn, so staff can
edit answers by dropping in a new file without a restart.  Gemini
answers in English; other languages go through Google Translate, and a
failed translation falls back to the English reply.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog

from tourstack.interfaces.llm_provider import ILLMProvider
from tourstack.interfaces.translation_provider import ITranslationProvider
from tourstack.utils.errors import TourStackError, ValidationError

logger = structlog.get_logger(logger_name=__name__)

NO_KNOWLEDGE_TEXT = (
    "No knowledge base documents have been uploaded yet. "
    "Please ask a museum staff member for assistance."
)

ACKNOWLEDGEMENT = (
    "I understand. I'll help visitors with questions about the museum "
    "based only on the information provided."
)

SYSTEM_PROMPT = """\
You are a friendly and helpful museum concierge assistant. Your role is to answer visitor questions about the museum using ONLY the information provided below.

IMPORTANT RULES:
1. ONLY answer based on the museum information provided below
2. If the answer is NOT in the provided information, politely say you don't have that specific information and suggest asking a museum staff member
3. Be concise, friendly, and helpful
4. Format responses for easy reading on mobile devices
5. If asked about something completely unrelated to the museum, politely redirect to museum-related topics

MUSEUM INFORMATION:
{context}"""


class ChatService:
    def __init__(
        self,
        llm: ILLMProvider,
        translator: ITranslationProvider,
        knowledge_dir: str | Path = "uploads/knowledge",
    ) -> None:
        self._llm = llm
        self._translator = translator
        self._knowledge_dir = Path(knowledge_dir)

    async def load_knowledge(self) -> tuple[str, list[str]]:
        """Return the combined knowledge text and the file names it came from."""
        return await asyncio.to_thread(self._read_knowledge)

    async def reply(self, message: str | None, language: str = "en") -> dict[str, Any]:
        if not message:
            raise ValidationError(message="Message is required")

        context, files = await self.load_knowledge()
        response = await self._llm.chat([
            ("user", SYSTEM_PROMPT.format(context=context or NO_KNOWLEDGE_TEXT)),
            ("model", ACKNOWLEDGEMENT),
            ("user", message),
        ])

        if language != "en" and response:
            try:
                translated = await self._translator.translate(response, language, "en")
            except TourStackError as exc:
                logger.warning("chat_translation_failed", language=language, error=str(exc))
            else:
                response = translated.get("translatedText") or response

        return {"response": response, "sources": files, "language": language}

    async def status(self) -> dict[str, Any]:
        _, files = await self.load_knowledge()
        available = self._llm.is_available()
        return {
            "available": available,
            "apiKeyConfigured": available,
            "knowledgeFilesCount": len(files),
            "knowledgeFiles": files,
        }

    def _read_knowledge(self) -> tuple[str, list[str]]:
        if not self._knowledge_dir.is_dir():
            self._knowledge_dir.mkdir(parents=True, exist_ok=True)
            logger.info("knowledge_dir_created", path=str(self._knowledge_dir))
            return "", []

        files = sorted(p.name for p in self._knowledge_dir.glob("*.txt") if p.is_file())
        context = ""
        for name in files:
            try:
                content = (self._knowledge_dir / name).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.error("knowledge_file_unreadable", file=name, error=str(exc))
                continue
            context += f"\n--- {name} ---\n{content}\n"
        return context, files
