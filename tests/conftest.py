"""Shared pytest fixtures for the TourStack test suite."""

from __future__ import annotations

import os
import tempfile
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from tourstack.interfaces.llm_provider import ILLMProvider
from tourstack.interfaces.translation_provider import ITranslationProvider
from tourstack.models.template import Template
from tourstack.providers.storage.sqlite_concierge_provider import SQLiteConciergeProvider
from tourstack.providers.storage.sqlite_media_provider import (
    SQLiteCollectionProvider,
    SQLiteMediaProvider,
)
from tourstack.providers.storage.sqlite_tour_provider import SQLiteTourProvider

# ---------------------------------------------------------------------------
# Temporary database
# ---------------------------------------------------------------------------


@pytest.fixture
def db_path():
    """Path of a throwaway SQLite file, removed after the test."""
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    yield tmp.name
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(tmp.name + suffix):
            os.unlink(tmp.name + suffix)


@pytest.fixture
async def tour_store(db_path: str) -> SQLiteTourProvider:
    store = SQLiteTourProvider(db_path=db_path)
    await store.initialize()
    return store


@pytest.fixture
async def media_store(db_path: str) -> SQLiteMediaProvider:
    store = SQLiteMediaProvider(db_path=db_path)
    await store.initialize()
    return store


@pytest.fixture
async def collection_store(db_path: str) -> SQLiteCollectionProvider:
    store = SQLiteCollectionProvider(db_path=db_path)
    await store.initialize()
    return store


@pytest.fixture
async def concierge_store(db_path: str) -> SQLiteConciergeProvider:
    store = SQLiteConciergeProvider(db_path=db_path)
    await store.initialize()
    return store


@pytest.fixture
async def template(tour_store: SQLiteTourProvider) -> Template:
    """A single template so tours can be created against the FK."""
    return await tour_store.save_template(
        Template(id="tpl-qr", name="QR Code", built_in=True)
    )


# ---------------------------------------------------------------------------
# Mock AI providers
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm() -> MagicMock:
    llm = MagicMock(spec=ILLMProvider)
    llm.complete = AsyncMock(return_value="The gallery opens at nine.")
    llm.chat = AsyncMock(return_value="The cafe is on the ground floor.")
    llm.analyze_image_json = AsyncMock(
        return_value={"description": "A bronze statue.", "tags": ["bronze", "statue"]}
    )
    llm.is_available = MagicMock(return_value=True)
    llm.get_provider_name = MagicMock(return_value="mock_llm")
    return llm


@pytest.fixture
def mock_translator() -> MagicMock:
    translator = MagicMock(spec=ITranslationProvider)

    async def _translate(text: str, target_lang: str, source_lang: str | None = None, **_: Any):
        return {"translatedText": f"{target_lang}:{text}"}

    translator.translate = AsyncMock(side_effect=_translate)
    translator.get_languages = AsyncMock(return_value=[{"code": "en", "name": "English"}])
    translator.is_available = MagicMock(return_value=True)
    return translator
