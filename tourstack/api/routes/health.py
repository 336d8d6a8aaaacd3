"""Liveness probe."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from tourstack.api.schemas import HealthResponse

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("", response_model=HealthResponse, summary="Health check")
async def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc).isoformat())
