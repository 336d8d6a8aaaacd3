"""Positioning templates (``/api/templates``), read-only over HTTP."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from tourstack.api.dependencies import TemplateServiceDep

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("", summary="List templates by name")
async def list_templates(templates: TemplateServiceDep) -> list[dict[str, Any]]:
    return [template.to_api() for template in await templates.list_templates()]


@router.get("/{template_id}", summary="Get one template")
async def get_template(template_id: str, templates: TemplateServiceDep) -> dict[str, Any]:
    return (await templates.get_template(template_id)).to_api()
