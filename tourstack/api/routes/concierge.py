"""AI concierge administration (``/api/concierge``).

# ─── ROUTE MAP ────────────────────────────────────────────────────────
#
# Endpoint                                      Method  Description
# ─────────────────────────────────────────────────────────────────────
# /config                                       GET     Config (created on first call)
# /config                                       PUT     Update config
# /knowledge?configId=                          GET     Knowledge sources
# /knowledge                                    POST    Add a knowledge source
# /knowledge/import/{collectionId}              POST    Upsert from a document collection
# /knowledge/{id}                               DELETE  Remove a source
# /knowledge/{id}/toggle                        PUT     Enable/disable a source
# /quick-actions?configId=                      GET     Quick actions
# /quick-actions                                POST    Add a quick action
# /quick-actions/reorder                        PUT     Bulk reorder
# /quick-actions/translate-all                  POST    Fill missing translations
# /quick-actions/{id}                           PUT     Update one
# /quick-actions/{id}                           DELETE  Remove one
# /preview                                      POST    Test the concierge with a message
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, status

from tourstack.api.dependencies import ConciergeServiceDep
from tourstack.api.schemas import (
    ConciergeConfigUpdateRequest,
    ConfigIdRequest,
    KnowledgeCreateRequest,
    MessageRequest,
    QuickActionReorderRequest,
    QuickActionRequest,
    ToggleRequest,
)

router = APIRouter(prefix="/api/concierge", tags=["concierge"])


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@router.get("/config", summary="Concierge config with knowledge and quick actions")
async def get_config(concierge: ConciergeServiceDep) -> dict[str, Any]:
    return (await concierge.get_or_create_config()).to_api()


@router.put("/config", summary="Update the concierge config")
async def update_config(body: ConciergeConfigUpdateRequest, concierge: ConciergeServiceDep) -> dict[str, Any]:
    config = await concierge.update_config(body.model_dump(exclude_unset=True))
    return config.to_api()


# ---------------------------------------------------------------------------
# Knowledge sources
# ---------------------------------------------------------------------------


@router.get("/knowledge", summary="List knowledge sources")
async def list_knowledge(
    concierge: ConciergeServiceDep,
    configId: str | None = None,  # noqa: N803
) -> list[dict[str, Any]]:
    return [source.to_api() for source in await concierge.list_knowledge(configId)]


@router.post("/knowledge", status_code=status.HTTP_201_CREATED, summary="Add a knowledge source")
async def add_knowledge(body: KnowledgeCreateRequest, concierge: ConciergeServiceDep) -> dict[str, Any]:
    source = await concierge.add_knowledge(body.model_dump(exclude_unset=True))
    return source.to_api()


@router.post("/knowledge/import/{collection_id}", summary="Import a document collection as knowledge")
async def import_collection(
    collection_id: str,
    body: ConfigIdRequest,
    concierge: ConciergeServiceDep,
) -> dict[str, Any]:
    return await concierge.import_collection(collection_id, body.config_id)


@router.delete("/knowledge/{knowledge_id}", summary="Remove a knowledge source")
async def delete_knowledge(knowledge_id: str, concierge: ConciergeServiceDep) -> dict[str, Any]:
    await concierge.delete_knowledge(knowledge_id)
    return {"success": True}


@router.put("/knowledge/{knowledge_id}/toggle", summary="Enable or disable a knowledge source")
async def toggle_knowledge(
    knowledge_id: str,
    body: ToggleRequest,
    concierge: ConciergeServiceDep,
) -> dict[str, Any]:
    return (await concierge.toggle_knowledge(knowledge_id, body.enabled)).to_api()


# ---------------------------------------------------------------------------
# Quick actions
# ---------------------------------------------------------------------------


@router.get("/quick-actions", summary="List quick actions")
async def list_quick_actions(
    concierge: ConciergeServiceDep,
    configId: str | None = None,  # noqa: N803
) -> list[dict[str, Any]]:
    return [action.to_api() for action in await concierge.list_quick_actions(configId)]


@router.post("/quick-actions", status_code=status.HTTP_201_CREATED, summary="Add a quick action")
async def add_quick_action(body: QuickActionRequest, concierge: ConciergeServiceDep) -> dict[str, Any]:
    action = await concierge.add_quick_action(body.model_dump(exclude_unset=True))
    return action.to_api()


@router.put("/quick-actions/reorder", summary="Reorder quick actions")
async def reorder_quick_actions(body: QuickActionReorderRequest, concierge: ConciergeServiceDep) -> dict[str, Any]:
    actions = [action.model_dump() for action in body.actions] if body.actions is not None else None
    await concierge.reorder_quick_actions(actions)
    return {"success": True}


@router.post("/quick-actions/translate-all", summary="Translate every quick action into all enabled languages")
async def translate_quick_actions(body: ConfigIdRequest, concierge: ConciergeServiceDep) -> dict[str, Any]:
    return await concierge.translate_quick_actions(body.config_id)


@router.put("/quick-actions/{action_id}", summary="Update a quick action")
async def update_quick_action(
    action_id: str,
    body: QuickActionRequest,
    concierge: ConciergeServiceDep,
) -> dict[str, Any]:
    action = await concierge.update_quick_action(action_id, body.model_dump(exclude_unset=True))
    return action.to_api()


@router.delete("/quick-actions/{action_id}", summary="Remove a quick action")
async def delete_quick_action(action_id: str, concierge: ConciergeServiceDep) -> dict[str, Any]:
    await concierge.delete_quick_action(action_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


@router.post("/preview", summary="Ask the configured concierge a test question")
async def preview(body: MessageRequest, concierge: ConciergeServiceDep) -> dict[str, Any]:
    return await concierge.preview(body.message, body.language)
