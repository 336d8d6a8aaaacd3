"""JSON-file settings store with environment overrides.

The admin UI edits five sections of integration settings.  They live in
``data/settings.json`` and are always read merged over ``DEFAULT_SETTINGS``,
so a missing or partial file still yields every key.

API keys present in the environment win over stored values on every
read and switch the matching ``...Enabled`` flag on.  Writes never copy
those environment values into the file.
"""

from __future__ import annotations

import asyncio
import copy
import json
from pathlib import Path
from typing import Any

import structlog

from tourstack.config.settings import Settings
from tourstack.interfaces.settings_provider import ISettingsProvider
from tourstack.utils.errors import ValidationError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_SETTINGS: dict[str, dict[str, Any]] = {
    "maps": {
        "googleMapsApiKey": "",
        "googleMapsEnabled": False,
        "openStreetMapEnabled": True,
        "defaultMapProvider": "openstreetmap",
    },
    "positioning": {
        "estimoteKey": "",
        "kontaktKey": "",
    },
    "transcription": {
        "deepgramApiKey": "",
        "deepgramEnabled": False,
        "whisperEnabled": False,
        "whisperEndpoint": "",
        "elevenLabsApiKey": "",
        "elevenLabsEnabled": False,
        "defaultProvider": "none",
    },
    "translation": {
        "libreTranslateUrl": "https://translate.supersoul.top/translate",
        "libreTranslateApiKey": "",
        "libreTranslateEnabled": True,
        "deepgramEnabled": False,
        "defaultProvider": "libretranslate",
    },
    "general": {
        "defaultLanguage": "en",
        "supportedLanguages": ["en"],
        "analyticsEnabled": True,
    },
}


class JSONSettingsProvider(ISettingsProvider):
    """Sectioned settings document persisted as pretty-printed JSON."""

    def __init__(self, path: str | Path, settings: Settings) -> None:
        self._path = Path(path)
        self._settings = settings
        self._lock = asyncio.Lock()

    async def get_all(self) -> dict[str, Any]:
        stored = await asyncio.to_thread(self._read_file)
        return self._apply_env(self._merge_defaults(stored))

    async def save_all(self, updates: dict[str, Any]) -> dict[str, Any]:
        for section, values in updates.items():
            if section in DEFAULT_SETTINGS and not isinstance(values, dict):
                raise ValidationError(message=f"Section {section} must be an object")
        async with self._lock:
            stored = self._merge_defaults(await asyncio.to_thread(self._read_file))
            for section, values in updates.items():
                if isinstance(values, dict) and isinstance(stored.get(section), dict):
                    stored[section] = {**stored[section], **values}
                else:
                    stored[section] = values
            await asyncio.to_thread(self._write_file, stored)
        logger.info("settings_saved", sections=sorted(updates))
        return self._apply_env(stored)

    async def update_section(self, section: str, updates: dict[str, Any]) -> dict[str, Any]:
        if section not in DEFAULT_SETTINGS:
            raise ValidationError(message=f"Unknown section: {section}")
        async with self._lock:
            stored = self._merge_defaults(await asyncio.to_thread(self._read_file))
            stored[section] = {**stored[section], **updates}
            await asyncio.to_thread(self._write_file, stored)
        logger.info("settings_section_saved", section=section)
        return self._apply_env(stored)

    # ── Private helpers ────────────────────────────────────────────────

    def _read_file(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("settings_file_unreadable", path=str(self._path), error=str(exc))
            return {}
        return data if isinstance(data, dict) else {}

    def _write_file(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    @staticmethod
    def _merge_defaults(stored: dict[str, Any]) -> dict[str, Any]:
        merged = copy.deepcopy(DEFAULT_SETTINGS)
        for section, values in stored.items():
            if section not in merged:
                merged[section] = values
            elif isinstance(values, dict):
                merged[section].update(values)
            else:
                logger.warning("settings_section_invalid", section=section)
        return merged

    def _apply_env(self, data: dict[str, Any]) -> dict[str, Any]:
        result = copy.deepcopy(data)
        if self._settings.google_maps_api_key:
            result["maps"]["googleMapsApiKey"] = self._settings.google_maps_api_key
            result["maps"]["googleMapsEnabled"] = True
        if self._settings.deepgram_api_key:
            result["transcription"]["deepgramApiKey"] = self._settings.deepgram_api_key
            result["transcription"]["deepgramEnabled"] = True
        if self._settings.elevenlabs_api_key:
            result["transcription"]["elevenLabsApiKey"] = self._settings.elevenlabs_api_key
            result["transcription"]["elevenLabsEnabled"] = True
        return result
