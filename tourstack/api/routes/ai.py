"""Image analysis proxies: Gemini (``/api/gemini``) and Google Vision (``/api/vision``)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from tourstack.api.dependencies import ImageAnalysisDep
from tourstack.api.schemas import ImageAnalysisRequest, VisionRequest

router = APIRouter(prefix="/api", tags=["ai"])


@router.post("/gemini/analyze", summary="Describe an image with Gemini")
async def gemini_analyze(body: ImageAnalysisRequest, analysis: ImageAnalysisDep) -> dict[str, Any]:
    return await analysis.describe(body.image)


@router.post("/vision/analyze", summary="Annotate an image with Google Vision")
async def vision_analyze(body: VisionRequest, analysis: ImageAnalysisDep) -> dict[str, Any]:
    return await analysis.annotate(body.image, body.features)
