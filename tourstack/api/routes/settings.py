"""Application settings stored in ``data/settings.json`` (``/api/settings``)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body

from tourstack.api.dependencies import SettingsStoreDep

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", summary="All settings sections")
async def get_settings(store: SettingsStoreDep) -> dict[str, Any]:
    return await store.get_all()


@router.put("", summary="Shallow-merge top-level sections")
async def save_settings(store: SettingsStoreDep, updates: dict[str, Any] = Body(...)) -> dict[str, Any]:
    return {"success": True, "settings": await store.save_all(updates)}


@router.patch("/{section}", summary="Merge into one section")
async def update_section(
    section: str,
    store: SettingsStoreDep,
    updates: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    return {"success": True, "settings": await store.update_section(section, updates)}
