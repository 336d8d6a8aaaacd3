"""Translation proxies: LibreTranslate (``/api/translate``) and Google (``/api/google-translate``)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from tourstack.api.dependencies import TranslationServiceDep
from tourstack.api.schemas import (
    DetectRequest,
    GoogleBatchTranslateRequest,
    GoogleTranslateRequest,
    TranslateRequest,
)

router = APIRouter(prefix="/api/translate", tags=["translation"])
google_router = APIRouter(prefix="/api/google-translate", tags=["translation"])


@router.post("", summary="Translate text with LibreTranslate")
async def translate(body: TranslateRequest, translation: TranslationServiceDep) -> dict[str, Any]:
    return await translation.translate(body.text, body.source_lang, body.target_lang, api_key=body.api_key)


@router.get("/languages", summary="LibreTranslate languages")
async def languages(translation: TranslationServiceDep) -> list[dict[str, Any]]:
    return await translation.languages()


@google_router.post("", summary="Translate text with Google")
async def google_translate(body: GoogleTranslateRequest, translation: TranslationServiceDep) -> dict[str, Any]:
    return await translation.google_translate(body.text, body.target_lang, body.source_lang, body.text_format)


@google_router.post("/batch", summary="Translate several texts with Google")
async def google_translate_batch(
    body: GoogleBatchTranslateRequest,
    translation: TranslationServiceDep,
) -> dict[str, Any]:
    return await translation.google_translate_batch(
        body.texts, body.target_lang, body.source_lang, body.text_format
    )


@google_router.post("/detect", summary="Detect the language of a text")
async def google_detect(body: DetectRequest, translation: TranslationServiceDep) -> dict[str, Any]:
    return await translation.google_detect(body.text)


@google_router.get("/languages", summary="Google Translate languages")
async def google_languages(translation: TranslationServiceDep, target: str = "en") -> dict[str, Any]:
    return await translation.google_languages(target)


@google_router.get("/status", summary="Google Translate availability")
async def google_status(translation: TranslationServiceDep) -> dict[str, Any]:
    return await translation.google_status()
