"""Image analysis for the media library: Gemini descriptions and Google Vision labels."""

from __future__ import annotations

import base64
import binascii
from typing import Any

import structlog

from tourstack.interfaces.llm_provider import ILLMProvider
from tourstack.interfaces.vision_provider import IVisionProvider
from tourstack.utils.errors import ValidationError

logger = structlog.get_logger(logger_name=__name__)

ANALYSIS_PROMPT = """\
Analyze this museum artifact/image and provide a strict JSON response with the following fields:
1. "description": A detailed, engaging description of the image suitable for a museum guide (2-3 sentences).
2. "tags": An array of 5-10 relevant keywords/tags.
3. "objects": An array of specific objects identified in the image.
4. "text": Any text visible in the image (OCR), or null if none.
5. "colors": An array of dominant colors, each as {"name": string, "hex": string}.
6. "suggestedTitle": A short, descriptive title for the image.
7. "mood": The overall mood or atmosphere of the image.
8. "lighting": A description of the lighting conditions.
9. "artStyle": The artistic style or period, if applicable.
10. "estimatedLocation": The likely location or setting depicted, if identifiable.

Ensure valid JSON output."""


def decode_image(image: str) -> bytes:
    """Decode base64 image data, accepting an optional ``data:...;base64,`` prefix."""
    if image.startswith("data:") and "," in image:
        image = image.split(",", 1)[1]
    try:
        return base64.b64decode(image, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(message="Invalid base64 image data") from exc


class ImageAnalysisService:
    def __init__(self, llm: ILLMProvider, vision: IVisionProvider) -> None:
        self._llm = llm
        self._vision = vision

    async def describe(self, image: str | None) -> dict[str, Any]:
        """Gemini JSON analysis of a base64 image."""
        if not image:
            raise ValidationError(message="No image data provided")
        image_bytes = decode_image(image)
        result = await self._llm.analyze_image_json(image_bytes, ANALYSIS_PROMPT)
        logger.info("image_described", fields=sorted(result))
        return result

    async def annotate(self, image: str | None, features: list[str] | None = None) -> dict[str, Any]:
        """Google Vision annotations for a base64 image."""
        if not image:
            raise ValidationError(message="Image data is required (base64)")
        if image.startswith("data:") and "," in image:
            image = image.split(",", 1)[1]
        return await self._vision.annotate(image, list(features or []))
