"""Unit tests for the thin AI front doors: translation, transcription, image analysis."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock, MagicMock

import pytest

from tourstack.interfaces.transcription_provider import ITranscriptionProvider
from tourstack.interfaces.vision_provider import IVisionProvider
from tourstack.providers.transcription.deepgram_provider import LISTEN_URL
from tourstack.providers.translation.google_translate_provider import GoogleTranslateProvider
from tourstack.services.image_analysis_service import (
    ANALYSIS_PROMPT,
    ImageAnalysisService,
    decode_image,
)
from tourstack.services.transcription_service import TranscriptionService
from tourstack.services.translation_service import TranslationService
from tourstack.utils.errors import ValidationError


def _make_google() -> MagicMock:
    google = MagicMock(spec=GoogleTranslateProvider)
    google.translate = AsyncMock(return_value={"translatedText": "Hola", "provider": "google"})
    google.translate_batch = AsyncMock(return_value=[{"translatedText": "Uno"}, {"translatedText": "Dos"}])
    google.detect = AsyncMock(return_value={"language": "fr", "confidence": 0.9})
    google.get_languages = AsyncMock(return_value=[{"code": "fr", "name": "French"}])
    google.status = AsyncMock(return_value={"available": True, "languageCount": 1})
    return google


def _make_transcriber(name: str, available: bool = True) -> MagicMock:
    provider = MagicMock(spec=ITranscriptionProvider)
    provider.transcribe = AsyncMock(return_value={"text": "hello", "provider": name})
    provider.is_available = MagicMock(return_value=available)
    return provider


# ─── Translation ──────────────────────────────────────────────────


class TestTranslationService:
    @pytest.fixture
    def google(self):
        return _make_google()

    @pytest.fixture
    def service(self, mock_translator, google):
        return TranslationService(mock_translator, google)

    async def test_translate_via_libre(self, service, mock_translator):
        result = await service.translate("Hello", "en", "de", api_key="k")
        assert result == {"translatedText": "de:Hello"}
        mock_translator.translate.assert_awaited_once_with("Hello", "de", "en", api_key="k")

    async def test_same_language_is_passthrough(self, service, mock_translator):
        assert await service.translate("Hello", "en", "en") == {"translatedText": "Hello"}
        mock_translator.translate.assert_not_awaited()

    @pytest.mark.parametrize("text,source,target", [("", "en", "fr"), ("Hi", None, "fr"), ("Hi", "en", "")])
    async def test_translate_requires_fields(self, service, text, source, target):
        with pytest.raises(ValidationError, match="Missing required fields"):
            await service.translate(text, source, target)

    async def test_google_translate(self, service, google):
        assert (await service.google_translate("Hello", "es"))["translatedText"] == "Hola"
        google.translate.assert_awaited_once_with("Hello", "es", None, "text")

    async def test_google_translate_validation(self, service):
        with pytest.raises(ValidationError, match="Text is required"):
            await service.google_translate("", "es")
        with pytest.raises(ValidationError, match="Target language is required"):
            await service.google_translate("Hello", None)

    async def test_google_batch(self, service):
        result = await service.google_translate_batch(["One", "Two"], "es")
        assert result["provider"] == "google"
        assert len(result["translations"]) == 2

    async def test_google_batch_requires_texts(self, service):
        with pytest.raises(ValidationError, match="Texts array is required"):
            await service.google_translate_batch([], "es")

    async def test_google_detect_and_languages(self, service):
        assert (await service.google_detect("Bonjour"))["language"] == "fr"
        assert await service.google_languages() == {"languages": [{"code": "fr", "name": "French"}]}
        assert (await service.google_status())["available"] is True


# ─── Transcription ────────────────────────────────────────────────


class TestTranscriptionService:
    async def test_defaults_to_deepgram(self):
        deepgram, whisper = _make_transcriber("deepgram"), _make_transcriber("whisper")
        service = TranscriptionService(deepgram, whisper)
        result = await service.transcribe(b"RIFF", "audio/wav", language="fr")
        assert result["provider"] == "deepgram"
        deepgram.transcribe.assert_awaited_once_with(b"RIFF", "audio/wav", language="fr", model=None)
        whisper.transcribe.assert_not_awaited()

    async def test_whisper_selected(self):
        whisper = _make_transcriber("whisper")
        service = TranscriptionService(_make_transcriber("deepgram"), whisper)
        assert (await service.transcribe(b"RIFF", "audio/wav", provider="whisper"))["provider"] == "whisper"

    async def test_unknown_provider(self):
        service = TranscriptionService(_make_transcriber("deepgram"), _make_transcriber("whisper"))
        with pytest.raises(ValidationError, match="Unknown provider: azure"):
            await service.transcribe(b"RIFF", "audio/wav", provider="azure")

    async def test_no_audio(self):
        service = TranscriptionService(_make_transcriber("deepgram"), _make_transcriber("whisper"))
        with pytest.raises(ValidationError, match="No audio file uploaded"):
            await service.transcribe(b"", "audio/wav")

    def test_status(self):
        service = TranscriptionService(
            _make_transcriber("deepgram", available=False), _make_transcriber("whisper"), "http://whisper:9000"
        )
        assert service.status() == {
            "deepgram": {"configured": False, "endpoint": LISTEN_URL},
            "whisper": {"configured": True, "endpoint": "http://whisper:9000"},
        }

    def test_status_without_whisper_endpoint(self):
        service = TranscriptionService(_make_transcriber("deepgram"), _make_transcriber("whisper", False))
        assert service.status()["whisper"]["endpoint"] is None


# ─── Image analysis ───────────────────────────────────────────────


@pytest.fixture
def vision() -> MagicMock:
    provider = MagicMock(spec=IVisionProvider)
    provider.annotate = AsyncMock(return_value={"labelAnnotations": [{"description": "Statue"}]})
    return provider


def test_decode_image_strips_data_prefix():
    raw = b"\x89PNG\r\n"
    encoded = base64.b64encode(raw).decode()
    assert decode_image(encoded) == raw
    assert decode_image(f"data:image/png;base64,{encoded}") == raw


class TestImageAnalysisService:
    async def test_describe(self, mock_llm, vision):
        service = ImageAnalysisService(mock_llm, vision)
        encoded = base64.b64encode(b"jpegdata").decode()
        result = await service.describe(f"data:image/jpeg;base64,{encoded}")
        assert result["description"] == "A bronze statue."
        mock_llm.analyze_image_json.assert_awaited_once_with(b"jpegdata", ANALYSIS_PROMPT)

    async def test_describe_requires_image(self, mock_llm, vision):
        with pytest.raises(ValidationError, match="No image data provided"):
            await ImageAnalysisService(mock_llm, vision).describe(None)

    async def test_annotate_passes_plain_base64(self, mock_llm, vision):
        service = ImageAnalysisService(mock_llm, vision)
        result = await service.annotate("data:image/png;base64,QUJD", ("LABEL_DETECTION",))
        assert result["labelAnnotations"][0]["description"] == "Statue"
        vision.annotate.assert_awaited_once_with("QUJD", ["LABEL_DETECTION"])

    async def test_annotate_requires_image(self, mock_llm, vision):
        with pytest.raises(ValidationError, match="Image data is required"):
            await ImageAnalysisService(mock_llm, vision).annotate("")
