"""Unit tests for the HTTP-backed providers.

The shared ``httpx.AsyncClient`` is replaced by an AsyncMock returning
real ``httpx.Response`` objects, so status and body handling run for
real without any network access.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from tourstack.config.settings import Settings
from tourstack.providers.cache.memory_cache import MemoryCacheProvider
from tourstack.providers.llm.gemini_provider import GeminiLLMProvider, _detect_media_type
from tourstack.providers.transcription.deepgram_provider import LISTEN_URL, DeepgramTranscriptionProvider
from tourstack.providers.transcription.whisper_provider import WhisperTranscriptionProvider
from tourstack.providers.translation.google_translate_provider import GoogleTranslateProvider
from tourstack.providers.translation.libretranslate_provider import LibreTranslateProvider
from tourstack.providers.translation.mock_translation_provider import MockTranslationProvider
from tourstack.providers.vision.google_vision_provider import GoogleVisionProvider
from tourstack.utils.errors import (
    ConfigurationError,
    LLMError,
    LLMResponseParseError,
    ProviderUnavailableError,
    RateLimitError,
    UpstreamError,
)


def _response(status: int = 200, payload=None, text: str | None = None, url: str = "https://x") -> httpx.Response:
    request = httpx.Request("GET", url)
    if text is not None:
        return httpx.Response(status, text=text, request=request)
    return httpx.Response(status, json=payload if payload is not None else {}, request=request)


def _client(**methods) -> AsyncMock:
    client = AsyncMock(spec=httpx.AsyncClient)
    for name, value in methods.items():
        if isinstance(value, Exception):
            setattr(client, name, AsyncMock(side_effect=value))
        else:
            setattr(client, name, AsyncMock(return_value=value))
    return client


def _gemini_reply(*parts: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": p} for p in parts]}}]}


# ─── Gemini ───────────────────────────────────────────────────────


class TestGeminiProvider:
    def _provider(self, client, key: str = "gm-key") -> GeminiLLMProvider:
        return GeminiLLMProvider(Settings(_env_file=None, gemini_api_key=key), client)

    async def test_chat_joins_parts(self):
        client = _client(post=_response(payload=_gemini_reply("Hello ", "visitor")))
        provider = self._provider(client)

        text = await provider.chat([("user", "Hi"), ("model", "Ok"), ("user", "Where?")], temperature=0.2)

        assert text == "Hello visitor"
        url = client.post.await_args.args[0]
        assert url.endswith("/models/gemini-2.0-flash:generateContent")
        kwargs = client.post.await_args.kwargs
        assert kwargs["params"] == {"key": "gm-key"}
        assert [c["role"] for c in kwargs["json"]["contents"]] == ["user", "model", "user"]
        assert kwargs["json"]["generationConfig"]["temperature"] == 0.2

    async def test_complete_is_single_user_turn(self):
        client = _client(post=_response(payload=_gemini_reply("Nine o'clock.")))
        assert await self._provider(client).complete("When?", max_tokens=500) == "Nine o'clock."
        body = client.post.await_args.kwargs["json"]
        assert body["contents"] == [{"role": "user", "parts": [{"text": "When?"}]}]
        assert body["generationConfig"]["maxOutputTokens"] == 500

    async def test_no_candidates_is_empty(self):
        client = _client(post=_response(payload={"candidates": []}))
        assert await self._provider(client).complete("Hi") == ""

    async def test_missing_key(self):
        with pytest.raises(ConfigurationError, match="Gemini API Key missing"):
            await self._provider(_client(), key="").complete("Hi")

    async def test_rate_limited(self):
        client = _client(post=_response(429, {"error": {}}))
        with pytest.raises(RateLimitError):
            await self._provider(client).complete("Hi")

    async def test_api_error(self):
        client = _client(post=_response(500, text="boom"))
        with pytest.raises(LLMError, match="Gemini API error: 500"):
            await self._provider(client).complete("Hi")

    async def test_transport_error(self):
        client = _client(post=httpx.ConnectError("refused"))
        with pytest.raises(LLMError, match="Gemini request failed"):
            await self._provider(client).complete("Hi")

    async def test_analyze_image_json(self):
        payload = {"description": "A vase", "tags": ["greek"]}
        client = _client(post=_response(payload=_gemini_reply(json.dumps(payload))))
        result = await self._provider(client).analyze_image_json(b"\x89PNG\r\n\x1a\nrest", "Describe")
        assert result == payload
        body = client.post.await_args.kwargs["json"]
        assert body["generationConfig"] == {"responseMimeType": "application/json"}
        assert body["contents"][0]["parts"][1]["inlineData"]["mimeType"] == "image/png"

    @pytest.mark.parametrize("reply", ["not json", "[1, 2]"])
    async def test_analyze_image_bad_json(self, reply):
        client = _client(post=_response(payload=_gemini_reply(reply)))
        with pytest.raises(LLMResponseParseError) as excinfo:
            await self._provider(client).analyze_image_json(b"\xff\xd8", "Describe")
        assert excinfo.value.raw == reply

    @pytest.mark.parametrize(
        "data,expected",
        [
            (b"\x89PNG\r\n\x1a\n", "image/png"),
            (b"RIFF\x00\x00\x00\x00WEBP", "image/webp"),
            (b"GIF89a", "image/gif"),
            (b"\xff\xd8\xff", "image/jpeg"),
            (b"????", "image/jpeg"),
        ],
    )
    def test_detect_media_type(self, data, expected):
        assert _detect_media_type(data) == expected

    def test_availability(self):
        assert self._provider(_client()).is_available() is True
        assert self._provider(_client(), key="").is_available() is False


# ─── Google Translate ─────────────────────────────────────────────


class TestGoogleTranslateProvider:
    async def test_translate_single(self):
        client = _client(request=_response(payload={
            "data": {"translations": [{"translatedText": "Hola", "detectedSourceLanguage": "en"}]}
        }))
        provider = GoogleTranslateProvider("gt-key", client)

        result = await provider.translate("Hello", "es")

        assert result == {"translatedText": "Hola", "detectedSourceLanguage": "en", "provider": "google"}
        method, url = client.request.await_args.args
        kwargs = client.request.await_args.kwargs
        assert method == "POST"
        assert url.endswith("/language/translate/v2")
        assert kwargs["params"] == {"key": "gt-key"}
        assert kwargs["json"] == {"q": "Hello", "target": "es", "format": "text"}
        assert "Referer" in kwargs["headers"]

    async def test_batch_sends_list_and_source(self):
        client = _client(request=_response(payload={
            "data": {"translations": [{"translatedText": "Uno"}, {"translatedText": "Dos"}]}
        }))
        result = await GoogleTranslateProvider("k", client).translate_batch(["One", "Two"], "es", "en")
        assert [t["translatedText"] for t in result] == ["Uno", "Dos"]
        assert client.request.await_args.kwargs["json"]["q"] == ["One", "Two"]
        assert client.request.await_args.kwargs["json"]["source"] == "en"

    async def test_detect(self):
        client = _client(request=_response(payload={
            "data": {"detections": [[{"language": "fr", "confidence": 0.98}]]}
        }))
        assert await GoogleTranslateProvider("k", client).detect("Bonjour") == {
            "language": "fr", "confidence": 0.98,
        }

    async def test_languages_cached(self):
        client = _client(request=_response(payload={
            "data": {"languages": [{"language": "fr", "name": "French"}, {"language": "xx"}]}
        }))
        provider = GoogleTranslateProvider("k", client, MemoryCacheProvider())
        first = await provider.get_languages("en")
        second = await provider.get_languages("en")
        assert first == second == [{"code": "fr", "name": "French"}, {"code": "xx", "name": "xx"}]
        assert client.request.await_count == 1

    async def test_error_in_body(self):
        client = _client(request=_response(payload={"error": {"code": 403, "message": "API key invalid"}}))
        with pytest.raises(UpstreamError, match="API key invalid") as excinfo:
            await GoogleTranslateProvider("k", client).translate("Hello", "es")
        assert excinfo.value.status_code == 403
        assert excinfo.value.details == {"code": 403, "message": "API key invalid"}

    async def test_connection_failure(self):
        client = _client(request=httpx.ConnectError("refused"))
        with pytest.raises(ProviderUnavailableError, match="Failed to connect"):
            await GoogleTranslateProvider("k", client).detect("Hi")

    async def test_missing_key(self):
        with pytest.raises(ConfigurationError, match="Google API key not found"):
            await GoogleTranslateProvider("", _client()).detect("Hi")

    async def test_status(self):
        assert await GoogleTranslateProvider("", _client()).status() == {
            "available": False, "reason": "Google Translate API key not configured",
        }
        ok = _client(request=_response(payload={"data": {"languages": [{"language": "fr"}]}}))
        assert await GoogleTranslateProvider("k", ok).status() == {"available": True, "languageCount": 1}
        down = _client(request=httpx.ConnectError("refused"))
        assert (await GoogleTranslateProvider("k", down).status())["available"] is False


# ─── LibreTranslate ───────────────────────────────────────────────


class TestLibreTranslateProvider:
    URL = "https://libre.example/translate"

    async def test_translate(self):
        client = _client(post=_response(payload={"translatedText": "Bonjour"}))
        provider = LibreTranslateProvider(self.URL, "", client)
        assert await provider.translate("Hello", "fr") == {"translatedText": "Bonjour"}
        assert client.post.await_args.args[0] == self.URL
        assert client.post.await_args.kwargs["json"] == {
            "q": "Hello", "source": "auto", "target": "fr", "format": "text",
        }

    async def test_request_key_overrides_configured(self):
        client = _client(post=_response(payload={"translatedText": "Hallo"}))
        await LibreTranslateProvider(self.URL, "server-key", client).translate("Hi", "de", "en", api_key="req-key")
        assert client.post.await_args.kwargs["json"]["api_key"] == "req-key"

    async def test_upstream_error(self):
        client = _client(post=_response(400, text="bad language"))
        with pytest.raises(UpstreamError, match="Translation failed") as excinfo:
            await LibreTranslateProvider(self.URL, "", client).translate("Hi", "zz")
        assert excinfo.value.status_code == 400
        assert excinfo.value.details == "bad language"

    async def test_unreachable(self):
        client = _client(post=httpx.ConnectError("refused"))
        with pytest.raises(ProviderUnavailableError, match="Translation service unavailable"):
            await LibreTranslateProvider(self.URL, "", client).translate("Hi", "fr")

    async def test_languages_from_sibling_endpoint(self):
        languages = [{"code": "fr", "name": "French"}]
        client = _client(get=_response(payload=languages))
        provider = LibreTranslateProvider(self.URL, "", client, MemoryCacheProvider())
        assert await provider.get_languages() == languages
        assert await provider.get_languages() == languages
        client.get.assert_awaited_once_with("https://libre.example/languages")


async def test_mock_translation_provider_prefixes_target():
    provider = MockTranslationProvider()
    assert provider.get_provider_name() == "mock"
    assert await provider.translate("Hello", "fr") == {"translatedText": "[FR] Hello", "mock": True}
    assert len(await provider.get_languages()) == 9


# ─── Google Vision ────────────────────────────────────────────────


class TestGoogleVisionProvider:
    async def test_annotate_adds_default_features(self):
        client = _client(post=_response(payload={"responses": [{"labelAnnotations": [{"description": "Vase"}]}]}))
        result = await GoogleVisionProvider("gv-key", client).annotate("QUJD", ["TEXT_DETECTION"])
        assert result == {"labelAnnotations": [{"description": "Vase"}]}
        request = client.post.await_args.kwargs["json"]["requests"][0]
        assert request["image"] == {"content": "QUJD"}
        assert [f["type"] for f in request["features"]] == ["TEXT_DETECTION", "LABEL_DETECTION", "WEB_DETECTION"]

    async def test_http_error_message(self):
        client = _client(post=_response(403, {"error": {"message": "Referer blocked"}}))
        with pytest.raises(UpstreamError, match="Referer blocked") as excinfo:
            await GoogleVisionProvider("k", client).annotate("QUJD", [])
        assert excinfo.value.status_code == 403

    async def test_error_inside_response(self):
        client = _client(post=_response(payload={"responses": [{"error": {"message": "Bad image data"}}]}))
        with pytest.raises(UpstreamError, match="Bad image data") as excinfo:
            await GoogleVisionProvider("k", client).annotate("QUJD", [])
        assert excinfo.value.status_code == 400

    async def test_missing_key(self):
        with pytest.raises(ConfigurationError, match="Google Vision API key not found"):
            await GoogleVisionProvider("", _client()).annotate("QUJD", [])


# ─── Transcription ────────────────────────────────────────────────


class TestDeepgramProvider:
    async def test_transcribe(self):
        payload = {
            "metadata": {"duration": 3.2},
            "results": {"channels": [{"alternatives": [
                {"transcript": "Welcome to the museum", "confidence": 0.97, "words": [{"word": "welcome"}]}
            ]}]},
        }
        client = _client(post=_response(payload=payload))
        result = await DeepgramTranscriptionProvider("dg-key", client).transcribe(b"RIFF", "audio/wav")

        assert result == {
            "text": "Welcome to the museum",
            "confidence": 0.97,
            "words": [{"word": "welcome"}],
            "duration": 3.2,
            "provider": "deepgram",
            "model": "nova-2",
            "language": "en",
        }
        assert client.post.await_args.args[0] == LISTEN_URL
        kwargs = client.post.await_args.kwargs
        assert kwargs["content"] == b"RIFF"
        assert kwargs["headers"]["Authorization"] == "Token dg-key"
        assert kwargs["params"]["smart_format"] == "true"

    async def test_empty_transcript(self):
        client = _client(post=_response(payload={"results": {"channels": [{"alternatives": [{}]}]}}))
        with pytest.raises(LLMResponseParseError, match="No transcript returned"):
            await DeepgramTranscriptionProvider("k", client).transcribe(b"RIFF", "audio/wav")

    async def test_upstream_error(self):
        client = _client(post=_response(401, text="Invalid credentials"))
        with pytest.raises(UpstreamError, match="Deepgram transcription failed") as excinfo:
            await DeepgramTranscriptionProvider("k", client).transcribe(b"RIFF", "audio/wav")
        assert excinfo.value.status_code == 401

    async def test_missing_key(self):
        with pytest.raises(ConfigurationError, match="Deepgram API key not configured"):
            await DeepgramTranscriptionProvider("", _client()).transcribe(b"RIFF", "audio/wav")


class TestWhisperProvider:
    async def test_transcribe(self):
        client = _client(post=_response(payload={"text": "Bienvenue", "segments": [{"id": 0}]}))
        provider = WhisperTranscriptionProvider("http://whisper:9000/inference", client)
        result = await provider.transcribe(b"RIFF", "audio/wav", language="fr")
        assert result == {"text": "Bienvenue", "segments": [{"id": 0}], "provider": "whisper", "language": "fr"}
        kwargs = client.post.await_args.kwargs
        assert kwargs["data"] == {"language": "fr", "response_format": "json"}
        assert kwargs["files"]["file"][1] == b"RIFF"

    async def test_missing_endpoint(self):
        with pytest.raises(ConfigurationError, match="Whisper endpoint not configured"):
            await WhisperTranscriptionProvider("", _client()).transcribe(b"RIFF", "audio/wav")


# ─── Cache ────────────────────────────────────────────────────────


class TestMemoryCache:
    async def test_set_get_delete(self):
        cache = MemoryCacheProvider()
        assert await cache.get("k") is None
        await cache.set("k", [1, 2])
        assert await cache.get("k") == [1, 2]
        assert await cache.exists("k") is True
        await cache.delete("k")
        assert await cache.exists("k") is False

    async def test_evicts_beyond_max_size(self):
        cache = MemoryCacheProvider(max_size=1)
        await cache.set("a", 1)
        await cache.set("b", 2)
        assert await cache.exists("a") is False
        assert await cache.get("b") == 2
