"""Public visitor chat grounded in ``uploads/knowledge`` (``/api/chat``)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from tourstack.api.dependencies import ChatServiceDep
from tourstack.api.schemas import MessageRequest

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("", summary="Ask the museum concierge")
async def chat(body: MessageRequest, chat_service: ChatServiceDep) -> dict[str, Any]:
    return await chat_service.reply(body.message, body.language or "en")


@router.get("/sources", summary="Knowledge files the chat is grounded in")
async def sources(chat_service: ChatServiceDep) -> dict[str, Any]:
    _, files = await chat_service.load_knowledge()
    return {"sources": files}


@router.get("/status", summary="Chat availability")
async def chat_status(chat_service: ChatServiceDep) -> dict[str, Any]:
    return await chat_service.status()
