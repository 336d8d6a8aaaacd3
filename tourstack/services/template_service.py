"""Positioning templates: listing and the built-in seed set.

Each built-in template corresponds to one positioning technology and
adds the custom stop fields an editor needs for it (beacon UUIDs, GPS
radius, NFC tag ids, ...).  Seeding matches on (name, built_in) so it is
safe to run at every startup.
"""

from __future__ import annotations

from typing import Any
from uuid import uuid4

import structlog

from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.models.template import Template
from tourstack.utils.errors import NotFoundError

logger = structlog.get_logger(logger_name=__name__)


def _field(field_id: str, label: str, field_type: str = "text", required: bool = False, **extra: Any) -> dict[str, Any]:
    return {"id": field_id, "name": field_id, "label": label, "type": field_type, "required": required, **extra}


BUILT_IN_TEMPLATES: list[dict[str, Any]] = [
    {
        "name": "QR Code",
        "description": "Zero hardware cost. Visitors scan codes with their camera. Perfect for getting started quickly.",
        "icon": "📱",
        "custom_fields": [
            _field("qrSize", "QR Code Size"),
            _field("placement", "Placement Notes", "textarea"),
            _field("shortCode", "Short URL Code"),
        ],
    },
    {
        "name": "GPS / Lat-Long",
        "description": "For outdoor exhibits, sculpture gardens, and archaeological sites. Uses device GPS with geofencing.",
        "icon": "📍",
        "custom_fields": [
            _field("latitude", "Latitude", "number", True),
            _field("longitude", "Longitude", "number", True),
            _field("radius", "Trigger Radius (meters)", "number", True, unit="m"),
            _field("elevation", "Elevation", "number", unit="m"),
        ],
    },
    {
        "name": "BLE Beacon",
        "description": "Indoor positioning using Bluetooth Low Energy beacons. ±1.5-3 meter accuracy with triangulation.",
        "icon": "📶",
        "custom_fields": [
            _field("uuid", "Beacon UUID", required=True),
            _field("major", "Major Value", "number", True),
            _field("minor", "Minor Value", "number", True),
            _field("txPower", "TX Power", "number"),
            _field("triggerRadius", "Trigger Radius (m)", "number", unit="m"),
        ],
    },
    {
        "name": "NFC",
        "description": "Tap-to-trigger with Near Field Communication. Ultra-short range, no battery required, very cost-effective.",
        "icon": "📲",
        "custom_fields": [
            _field("tagId", "NFC Tag ID", required=True),
            _field("tagType", "Tag Type"),
            _field("tapInstructions", "Tap Instructions", "textarea"),
        ],
    },
    {
        "name": "RFID",
        "description": "Radio Frequency Identification for medium-range tracking. Great for artifact tracking + visitor triggers.",
        "icon": "🔖",
        "custom_fields": [
            _field("tagId", "RFID Tag ID", required=True),
            _field("frequency", "Frequency (LF/HF/UHF)"),
            _field("isActive", "Active Tag?"),
        ],
    },
    {
        "name": "WiFi Positioning",
        "description": "Uses existing WiFi infrastructure for triangulation. 5-15 meter accuracy, lower cost if WiFi installed.",
        "icon": "📡",
        "custom_fields": [
            _field("accessPoints", "Access Point BSSIDs", "textarea", True),
            _field("signalThreshold", "Signal Threshold (dBm)", "number"),
        ],
    },
    {
        "name": "Ultra-Wideband (UWB)",
        "description": "Highest accuracy at ±10-50cm. Real-time positioning for premium installations.",
        "icon": "🎯",
        "custom_fields": [
            _field("anchorId", "UWB Anchor ID", required=True),
            _field("xCoord", "X Coordinate", "number", True),
            _field("yCoord", "Y Coordinate", "number", True),
            _field("zCoord", "Z Coordinate", "number"),
            _field("radius", "Trigger Radius (cm)", "number", unit="cm"),
        ],
    },
]


class TemplateService:
    def __init__(self, store: ITourProvider) -> None:
        self._store = store

    async def list_templates(self) -> list[Template]:
        return await self._store.list_templates()

    async def get_template(self, template_id: str) -> Template:
        template = await self._store.get_template(template_id)
        if template is None:
            raise NotFoundError(message="Template not found")
        return template

    async def seed_built_in(self) -> int:
        """Create any missing built-in template.  Returns how many were created."""
        created = 0
        for definition in BUILT_IN_TEMPLATES:
            if await self._store.find_template(definition["name"], built_in=True) is not None:
                logger.debug("template_exists", name=definition["name"])
                continue
            await self._store.save_template(
                Template.model_validate({"id": str(uuid4()), "built_in": True, **definition})
            )
            created += 1
            logger.info("template_seeded", name=definition["name"])
        return created
