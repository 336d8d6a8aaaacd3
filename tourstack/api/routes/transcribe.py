"""Speech-to-text (``/api/transcribe``)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, File, Form, UploadFile

from tourstack.api.dependencies import TranscriptionServiceDep

router = APIRouter(prefix="/api/transcribe", tags=["transcription"])


@router.post("", summary="Transcribe an uploaded audio file")
async def transcribe(
    transcription: TranscriptionServiceDep,
    audio: UploadFile | None = File(None),
    provider: str | None = Form(None),
    language: str | None = Form(None),
    model: str | None = Form(None),
) -> dict[str, Any]:
    data = await audio.read() if audio is not None else None
    mime_type = (audio.content_type if audio is not None else None) or "audio/webm"
    return await transcription.transcribe(data, mime_type, provider=provider, language=language, model=model)


@router.get("/status", summary="Configured transcription providers")
async def transcribe_status(transcription: TranscriptionServiceDep) -> dict[str, Any]:
    return transcription.status()
