"""AI concierge administration and the admin-side chat preview.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services.
# Depends on: IConciergeProvider, ICollectionProvider (knowledge import),
#             ILLMProvider (Gemini), GoogleTranslateProvider.
#
# The museum has a single concierge config, created with defaults on
# first read.  Knowledge sources are plain text the model may answer
# from; quick actions are multilingual suggested questions.
#
# Preview prompt layout:
#
#   {persona}
#
#   KNOWLEDGE BASE:
#   {source 1}
#   ---
#   {source 2}
#
#   ---
#
#   Visitor Question (in {language}):
#   {message}
#
#   Answer the visitor's question based ONLY on the knowledge base ...
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import structlog

from tourstack.interfaces.concierge_provider import IConciergeProvider
from tourstack.interfaces.llm_provider import ILLMProvider
from tourstack.interfaces.media_provider import ICollectionProvider
from tourstack.interfaces.translation_provider import ITranslationProvider
from tourstack.models.concierge import DEFAULT_WELCOME, ConciergeConfig, KnowledgeSource, QuickAction
from tourstack.utils.errors import (
    ConfigurationError,
    NotFoundError,
    ProviderUnavailableError,
    RateLimitError,
    UpstreamError,
    ValidationError,
)

logger = structlog.get_logger(logger_name=__name__)

DOCUMENT_COLLECTION = "document_collection"
FALLBACK_ANSWER = "I apologize, I was unable to process your question."

_SECTION_SEPARATOR = "\n\n---\n\n"

_PREVIEW_INSTRUCTIONS = (
    "Answer the visitor's question based ONLY on the knowledge base above. "
    "If you cannot find the answer, politely say you don't have that information. "
    "Keep your response concise and helpful."
)


def build_preview_prompt(persona: str, knowledge: list[str], message: str, language: str | None) -> str:
    context = _SECTION_SEPARATOR.join(knowledge)
    return (
        f"{persona}\n\n"
        f"KNOWLEDGE BASE:\n{context}\n\n---\n\n"
        f"Visitor Question (in {language or 'English'}):\n{message}\n\n"
        f"{_PREVIEW_INSTRUCTIONS}"
    )


def collection_text(items: list[dict[str, Any]]) -> str:
    """Extracted document text and AI summaries of a collection's items."""
    parts: list[str] = []
    for item in items:
        metadata = item.get("metadata") or {}
        if metadata.get("extractedText"):
            parts.append(f"## {metadata.get('fileName') or 'Document'}\n\n{metadata['extractedText']}")
        summary = (metadata.get("aiAnalysis") or {}).get("summary")
        if summary:
            parts.append(f"**Summary:** {summary}")
    return _SECTION_SEPARATOR.join(parts)


class ConciergeService:
    def __init__(
        self,
        store: IConciergeProvider,
        collections: ICollectionProvider,
        llm: ILLMProvider,
        translator: ITranslationProvider,
        config: dict[str, Any] | None = None,
    ) -> None:
        concierge_cfg = (config or {}).get("concierge", {})
        self._store = store
        self._collections = collections
        self._llm = llm
        self._translator = translator
        self._default_languages: list[str] = concierge_cfg.get(
            "default_languages", ["en", "es", "fr", "de"]
        )
        self._temperature: float = concierge_cfg.get("preview_temperature", 0.7)
        self._max_tokens: int = concierge_cfg.get("preview_max_tokens", 500)

    # ── Config ─────────────────────────────────────────────────────────

    async def get_or_create_config(self) -> ConciergeConfig:
        config = await self._store.get_first_config()
        if config is not None:
            return config
        created = await self._store.create_config(
            ConciergeConfig(
                id=str(uuid4()),
                welcome_message=dict(DEFAULT_WELCOME),
                enabled_languages=list(self._default_languages),
            )
        )
        logger.info("concierge_config_created", config_id=created.id)
        return await self._store.get_config(created.id) or created

    async def update_config(self, updates: dict[str, Any]) -> ConciergeConfig:
        config_id = updates.get("id")
        if not config_id:
            raise ValidationError(message="Config ID required")
        config = await self._require_config(config_id)
        changes = {
            k: v
            for k, v in updates.items()
            if k not in ("id", "knowledge_sources", "quick_actions", "created_at", "updated_at")
        }
        for key in ("welcome_message", "enabled_languages"):
            if not changes.get(key):
                changes.pop(key, None)
        await self._store.update_config(config.merged(changes))
        return await self._require_config(config_id)

    # ── Knowledge ──────────────────────────────────────────────────────

    async def list_knowledge(self, config_id: str | None) -> list[KnowledgeSource]:
        if not config_id:
            config_id = (await self.get_or_create_config()).id
        return await self._store.list_knowledge(config_id)

    async def add_knowledge(self, data: dict[str, Any]) -> KnowledgeSource:
        if not all(data.get(k) for k in ("config_id", "source_type", "title", "content")):
            raise ValidationError(message="Missing required fields")
        source = KnowledgeSource(
            id=str(uuid4()),
            config_id=data["config_id"],
            source_type=data["source_type"],
            source_id=data.get("source_id"),
            title=data["title"],
            content=data["content"],
            character_count=len(data["content"]),
            priority=data.get("priority") or 0,
        )
        return await self._store.create_knowledge(source)

    async def import_collection(self, collection_id: str, config_id: str | None) -> dict[str, Any]:
        """Create or refresh the knowledge source built from a document collection."""
        if not config_id:
            raise ValidationError(message="Config ID required")
        collection = await self._collections.get_collection(collection_id)
        if collection is None:
            raise NotFoundError(message="Collection not found")

        text = collection_text(collection.items)
        if not text.strip():
            raise ValidationError(message="No text content found in collection")

        existing = await self._store.find_knowledge(config_id, DOCUMENT_COLLECTION, collection_id)
        if existing is not None:
            updated = await self._store.update_knowledge(
                existing.model_copy(update={"content": text, "character_count": len(text)})
            )
            logger.info("knowledge_reimported", collection_id=collection_id, chars=len(text))
            return {**updated.to_api(), "isUpdate": True}

        created = await self._store.create_knowledge(KnowledgeSource(
            id=str(uuid4()),
            config_id=config_id,
            source_type=DOCUMENT_COLLECTION,
            source_id=collection_id,
            title=collection.name,
            content=text,
            character_count=len(text),
        ))
        logger.info("knowledge_imported", collection_id=collection_id, chars=len(text))
        return created.to_api()

    async def delete_knowledge(self, knowledge_id: str) -> None:
        if not await self._store.delete_knowledge(knowledge_id):
            raise NotFoundError(message="Knowledge source not found")

    async def toggle_knowledge(self, knowledge_id: str, enabled: bool) -> KnowledgeSource:
        source = await self._store.get_knowledge(knowledge_id)
        if source is None:
            raise NotFoundError(message="Knowledge source not found")
        return await self._store.update_knowledge(source.model_copy(update={"enabled": enabled}))

    # ── Quick actions ──────────────────────────────────────────────────

    async def list_quick_actions(self, config_id: str | None) -> list[QuickAction]:
        if not config_id:
            config_id = (await self.get_or_create_config()).id
        return await self._store.list_quick_actions(config_id)

    async def add_quick_action(self, data: dict[str, Any]) -> QuickAction:
        if not all(data.get(k) for k in ("config_id", "question", "category")):
            raise ValidationError(message="Missing required fields")
        order = data.get("order")
        if order is None:
            max_order = await self._store.max_quick_action_order(data["config_id"])
            order = (max_order if max_order is not None else -1) + 1
        action = QuickAction(
            id=str(uuid4()),
            config_id=data["config_id"],
            question=data["question"],
            category=data["category"],
            icon=data.get("icon"),
            order=order,
        )
        return await self._store.create_quick_action(action)

    async def update_quick_action(self, action_id: str, updates: dict[str, Any]) -> QuickAction:
        action = await self._store.get_quick_action(action_id)
        if action is None:
            raise NotFoundError(message="Quick action not found")
        changes = {
            k: v
            for k, v in updates.items()
            if k in ("question", "category", "icon", "enabled", "order") and v is not None
        }
        return await self._store.update_quick_action(action.merged(changes))

    async def delete_quick_action(self, action_id: str) -> None:
        if not await self._store.delete_quick_action(action_id):
            raise NotFoundError(message="Quick action not found")

    async def reorder_quick_actions(self, actions: list[dict[str, Any]] | None) -> None:
        if actions is None:
            raise ValidationError(message="Actions array required")
        await self._store.set_quick_action_orders({a["id"]: a["order"] for a in actions})

    async def translate_quick_actions(self, config_id: str | None) -> dict[str, Any]:
        """Fill in every missing language of each quick action from its English text."""
        if not config_id:
            raise ValidationError(message="Config ID required")
        if not self._translator.is_available():
            raise ConfigurationError(
                message="Translation API key not configured",
                provider_name=self._translator.get_provider_name(),
            )
        config = await self._store.get_config(config_id)
        if config is None:
            raise NotFoundError(message="Config not found")

        targets = [lang for lang in config.enabled_languages if lang != "en"]
        if not targets:
            raise ValidationError(message="No target languages configured besides English")

        actions = await self._store.list_quick_actions(config_id)
        if not actions:
            raise ValidationError(message="No quick actions to translate")

        translated_count = 0
        for action in actions:
            english = action.question.get("en")
            if not english:
                continue
            question = dict(action.question)
            for lang in targets:
                if question.get(lang):
                    continue
                try:
                    result = await self._translator.translate(english, lang, "en")
                except (UpstreamError, RateLimitError, ProviderUnavailableError) as exc:
                    logger.warning("quick_action_translation_failed", action_id=action.id, lang=lang, error=str(exc))
                    continue
                if result.get("translatedText"):
                    question[lang] = result["translatedText"]
            await self._store.update_quick_action(action.model_copy(update={"question": question}))
            translated_count += 1

        logger.info("quick_actions_translated", config_id=config_id, count=translated_count)
        return {"success": True, "translatedCount": translated_count, "languages": targets}

    # ── Preview ────────────────────────────────────────────────────────

    async def preview(self, message: str | None, language: str | None = None) -> dict[str, Any]:
        if not message:
            raise ValidationError(message="Message required")
        config = await self._store.get_first_config()
        if config is None:
            raise NotFoundError(message="Concierge not configured")

        sources = [k for k in config.knowledge_sources if k.enabled]
        prompt = build_preview_prompt(
            config.persona_prompt(), [k.content for k in sources], message, language
        )
        answer = await self._llm.complete(
            prompt, temperature=self._temperature, max_tokens=self._max_tokens
        )
        return {"response": answer or FALLBACK_ANSWER, "sources": [k.title for k in sources]}

    async def _require_config(self, config_id: str) -> ConciergeConfig:
        config = await self._store.get_config(config_id)
        if config is None:
            raise NotFoundError(message="Config not found")
        return config
