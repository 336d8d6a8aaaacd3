"""Unit tests for ConciergeService with a real store and mocked Gemini/Translate."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from tourstack.models.media import Collection
from tourstack.providers.translation.google_translate_provider import GoogleTranslateProvider
from tourstack.services.concierge_service import (
    DOCUMENT_COLLECTION,
    FALLBACK_ANSWER,
    ConciergeService,
    build_preview_prompt,
    collection_text,
)
from tourstack.utils.errors import ConfigurationError, NotFoundError, UpstreamError, ValidationError


@pytest.fixture
def service(concierge_store, collection_store, mock_llm, mock_translator) -> ConciergeService:
    return ConciergeService(
        concierge_store,
        collection_store,
        mock_llm,
        mock_translator,
        config={"concierge": {"default_languages": ["en", "fr", "de"]}},
    )


def _document_collection(collection_id: str = "docs-1") -> Collection:
    return Collection(
        id=collection_id,
        name="Visitor Handbook",
        type="document_collection",
        items=[
            {
                "id": "i1",
                "metadata": {
                    "fileName": "hours.pdf",
                    "extractedText": "Open daily 9-17.",
                    "aiAnalysis": {"summary": "Opening hours."},
                },
            },
            {"id": "i2", "metadata": {}},
        ],
    )


# ─── Helpers ──────────────────────────────────────────────────────


def test_collection_text():
    text = collection_text(_document_collection().items)
    assert text == "## hours.pdf\n\nOpen daily 9-17.\n\n---\n\n**Summary:** Opening hours."


def test_build_preview_prompt_layout():
    prompt = build_preview_prompt("PERSONA", ["one", "two"], "When?", None)
    assert prompt.startswith("PERSONA\n\nKNOWLEDGE BASE:\none\n\n---\n\ntwo\n\n---\n\n")
    assert "Visitor Question (in English):\nWhen?" in prompt
    assert "based ONLY on the knowledge base" in prompt


# ─── Config ───────────────────────────────────────────────────────


class TestConfig:
    async def test_created_on_first_read(self, service):
        config = await service.get_or_create_config()
        assert config.enabled is False
        assert config.enabled_languages == ["en", "fr", "de"]
        assert (await service.get_or_create_config()).id == config.id

    async def test_update(self, service):
        config = await service.get_or_create_config()
        updated = await service.update_config({
            "id": config.id,
            "enabled": True,
            "persona": "scholarly",
            "welcome_message": {},
        })
        assert updated.enabled is True
        assert updated.persona == "scholarly"
        assert updated.welcome_message == config.welcome_message

    async def test_update_requires_id(self, service):
        with pytest.raises(ValidationError, match="Config ID required"):
            await service.update_config({"enabled": True})

    async def test_update_unknown_config(self, service):
        with pytest.raises(NotFoundError, match="Config not found"):
            await service.update_config({"id": "ghost"})


# ─── Knowledge ────────────────────────────────────────────────────


class TestKnowledge:
    async def test_add_counts_characters(self, service):
        config = await service.get_or_create_config()
        source = await service.add_knowledge({
            "config_id": config.id,
            "source_type": "custom_text",
            "title": "Parking",
            "content": "Free parking.",
            "priority": 3,
        })
        assert source.character_count == len("Free parking.")
        assert [k.id for k in await service.list_knowledge(None)] == [source.id]

    async def test_add_requires_fields(self, service):
        with pytest.raises(ValidationError, match="Missing required fields"):
            await service.add_knowledge({"config_id": "c", "title": "x"})

    async def test_import_collection_then_reimport(self, service, collection_store):
        config = await service.get_or_create_config()
        await collection_store.create_collection(_document_collection())

        first = await service.import_collection("docs-1", config.id)
        assert first["sourceType"] == DOCUMENT_COLLECTION
        assert first["title"] == "Visitor Handbook"
        assert "isUpdate" not in first

        second = await service.import_collection("docs-1", config.id)
        assert second["isUpdate"] is True
        assert second["id"] == first["id"]
        assert len(await service.list_knowledge(config.id)) == 1

    async def test_import_empty_collection(self, service, collection_store):
        config = await service.get_or_create_config()
        await collection_store.create_collection(Collection(id="empty", name="Empty"))
        with pytest.raises(ValidationError, match="No text content"):
            await service.import_collection("empty", config.id)

    async def test_import_unknown_collection(self, service):
        config = await service.get_or_create_config()
        with pytest.raises(NotFoundError, match="Collection not found"):
            await service.import_collection("nope", config.id)

    async def test_toggle_and_delete(self, service):
        config = await service.get_or_create_config()
        source = await service.add_knowledge({
            "config_id": config.id, "source_type": "custom_text", "title": "T", "content": "C",
        })
        toggled = await service.toggle_knowledge(source.id, False)
        assert toggled.enabled is False
        await service.delete_knowledge(source.id)
        with pytest.raises(NotFoundError):
            await service.delete_knowledge(source.id)


# ─── Quick actions ────────────────────────────────────────────────


class TestQuickActions:
    async def _add(self, service, config_id, english: str, **extra):
        return await service.add_quick_action({
            "config_id": config_id,
            "question": {"en": english, **extra},
            "category": "general",
        })

    async def test_add_appends_order(self, service):
        config = await service.get_or_create_config()
        first = await self._add(service, config.id, "Where is the cafe?")
        second = await self._add(service, config.id, "When do you close?")
        assert (first.order, second.order) == (0, 1)

    async def test_update_ignores_none(self, service):
        config = await service.get_or_create_config()
        action = await self._add(service, config.id, "Where is the cafe?")
        updated = await service.update_quick_action(action.id, {"icon": "☕", "category": None})
        assert updated.icon == "☕"
        assert updated.category == "general"

    async def test_reorder(self, service):
        config = await service.get_or_create_config()
        a = await self._add(service, config.id, "A?")
        b = await self._add(service, config.id, "B?")
        await service.reorder_quick_actions([{"id": a.id, "order": 1}, {"id": b.id, "order": 0}])
        assert [q.id for q in await service.list_quick_actions(config.id)] == [b.id, a.id]

    async def test_reorder_requires_actions(self, service):
        with pytest.raises(ValidationError, match="Actions array required"):
            await service.reorder_quick_actions(None)

    async def test_translate_fills_missing_languages(self, service, mock_translator):
        config = await service.get_or_create_config()
        await self._add(service, config.id, "Where is the cafe?", fr="Où est le café ?")

        result = await service.translate_quick_actions(config.id)

        assert result == {"success": True, "translatedCount": 1, "languages": ["fr", "de"]}
        (action,) = await service.list_quick_actions(config.id)
        assert action.question == {
            "en": "Where is the cafe?",
            "fr": "Où est le café ?",
            "de": "de:Where is the cafe?",
        }
        mock_translator.translate.assert_awaited_once_with("Where is the cafe?", "de", "en")

    async def test_translate_failure_is_skipped(self, service, mock_translator):
        config = await service.get_or_create_config()
        await self._add(service, config.id, "Where is the cafe?")
        mock_translator.translate.side_effect = UpstreamError(message="quota")
        result = await service.translate_quick_actions(config.id)
        assert result["translatedCount"] == 1
        (action,) = await service.list_quick_actions(config.id)
        assert action.question == {"en": "Where is the cafe?"}

    async def test_translate_without_api_key(self, concierge_store, collection_store, mock_llm):
        http_client = AsyncMock(spec=httpx.AsyncClient)
        service = ConciergeService(
            concierge_store,
            collection_store,
            mock_llm,
            GoogleTranslateProvider("", http_client),
            config={"concierge": {"default_languages": ["en", "fr"]}},
        )
        config = await service.get_or_create_config()
        await self._add(service, config.id, "Where is the cafe?")

        with pytest.raises(ConfigurationError, match="Translation API key not configured"):
            await service.translate_quick_actions(config.id)

        (action,) = await service.list_quick_actions(config.id)
        assert action.question == {"en": "Where is the cafe?"}
        http_client.request.assert_not_called()

    async def test_translate_needs_targets(self, service):
        config = await service.get_or_create_config()
        await service.update_config({"id": config.id, "enabled_languages": ["en"]})
        with pytest.raises(ValidationError, match="No target languages"):
            await service.translate_quick_actions(config.id)

    async def test_translate_needs_actions(self, service):
        config = await service.get_or_create_config()
        with pytest.raises(ValidationError, match="No quick actions to translate"):
            await service.translate_quick_actions(config.id)


# ─── Preview ──────────────────────────────────────────────────────


class TestPreview:
    async def test_preview_uses_enabled_sources(self, service, mock_llm):
        config = await service.get_or_create_config()
        kept = await service.add_knowledge({
            "config_id": config.id, "source_type": "custom_text", "title": "Hours", "content": "Open 9-5.",
        })
        hidden = await service.add_knowledge({
            "config_id": config.id, "source_type": "custom_text", "title": "Secret", "content": "Vault code.",
        })
        await service.toggle_knowledge(hidden.id, False)

        result = await service.preview("When do you open?", "French")

        assert result == {"response": "The gallery opens at nine.", "sources": [kept.title]}
        prompt = mock_llm.complete.await_args.args[0]
        assert "Open 9-5." in prompt
        assert "Vault code." not in prompt
        assert "Visitor Question (in French):" in prompt
        assert mock_llm.complete.await_args.kwargs == {"temperature": 0.7, "max_tokens": 500}

    async def test_empty_answer_falls_back(self, service, mock_llm):
        await service.get_or_create_config()
        mock_llm.complete.return_value = ""
        result = await service.preview("Hello?")
        assert result["response"] == FALLBACK_ANSWER

    async def test_preview_requires_message(self, service):
        with pytest.raises(ValidationError, match="Message required"):
            await service.preview("")

    async def test_preview_without_config(self, service):
        with pytest.raises(NotFoundError, match="Concierge not configured"):
            await service.preview("Hello?")
