"""Stop content blocks — a tagged union on ``type``.

Each stop holds an ordered list of blocks.  The stored envelope is::

    {"id": "block_...", "type": "text", "order": 0, "data": {...},
     "createdAt": "...", "updatedAt": "..."}

``data`` is typed per block kind.  Editors add presentation keys over time
(captions, timings, overlay settings), so every data model keeps unknown
keys (``extra="allow"``) instead of rejecting or dropping them.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import ConfigDict, Field, TypeAdapter

from tourstack.models.base import LocalizedText, TourStackModel
from tourstack.utils.slugs import generate_item_id


class PositioningMethod(str, Enum):
    """Technology used to trigger a stop for a visitor."""

    QR_CODE = "qr_code"
    GPS = "gps"
    BLE_BEACON = "ble_beacon"
    BLE_VIRTUAL = "ble_virtual"
    NFC = "nfc"
    RFID = "rfid"
    WIFI = "wifi"
    UWB = "uwb"
    IMAGE_RECOGNITION = "image_recognition"
    AUDIO_WATERMARK = "audio_watermark"
    MANUAL = "manual"


def _blank_text() -> LocalizedText:
    return {"en": ""}


# ─── Block payloads ──────────────────────────────────────────────────


class BlockData(TourStackModel):
    model_config = ConfigDict(extra="allow")


class TextBlockData(BlockData):
    content: LocalizedText = Field(default_factory=_blank_text)
    style: str = "normal"


class ImageBlockData(BlockData):
    url: str = ""
    alt: LocalizedText = Field(default_factory=_blank_text)
    caption: LocalizedText | None = None
    size: str = "medium"


class GalleryBlockData(BlockData):
    images: list[dict[str, Any]] = Field(default_factory=list)
    layout: str = "carousel"
    crossfade_duration: int = 500


class TimelineGalleryBlockData(BlockData):
    """Images cross-faded against an audio track's current time."""

    images: list[dict[str, Any]] = Field(default_factory=list)
    audio_url: str = ""
    audio_duration: float = 0
    crossfade_duration: int = 500


class AudioBlockData(BlockData):
    # Language code -> audio file URL.
    audio_files: dict[str, str] = Field(default_factory=dict)
    title: LocalizedText = Field(default_factory=_blank_text)
    duration: float = 0
    autoplay: bool = False
    show_transcript: bool = False
    transcript: LocalizedText | None = None


class VideoBlockData(BlockData):
    url: str = ""
    caption: LocalizedText | None = None
    autoplay: bool = False


class QuoteBlockData(BlockData):
    quote: LocalizedText = Field(default_factory=_blank_text)
    # Localized like the quote; older blocks hold a plain string.
    author: LocalizedText | str | None = None
    source: LocalizedText | str | None = None


class PositioningBlockData(BlockData):
    method: PositioningMethod = PositioningMethod.QR_CODE
    config: dict[str, Any] = Field(
        default_factory=lambda: {"method": "qr_code", "url": "", "shortCode": ""}
    )


class MapBlockData(BlockData):
    latitude: float | None = None
    longitude: float | None = None
    zoom: int = 15
    provider: str = "openstreetmap"
    markers: list[dict[str, Any]] = Field(default_factory=list)


class TourBlockData(BlockData):
    """Tour intro card shown at the top of a stop."""

    title: LocalizedText = Field(default_factory=_blank_text)
    description: LocalizedText = Field(default_factory=_blank_text)
    image: str = ""


# ─── Block envelopes ─────────────────────────────────────────────────


class _Block(TourStackModel):
    id: str = Field(default_factory=lambda: generate_item_id("block"))
    order: int = 0
    created_at: str | None = None
    updated_at: str | None = None


class TextBlock(_Block):
    type: Literal["text"] = "text"
    data: TextBlockData = Field(default_factory=TextBlockData)


class ImageBlock(_Block):
    type: Literal["image"] = "image"
    data: ImageBlockData = Field(default_factory=ImageBlockData)


class GalleryBlock(_Block):
    type: Literal["gallery"] = "gallery"
    data: GalleryBlockData = Field(default_factory=GalleryBlockData)


class TimelineGalleryBlock(_Block):
    type: Literal["timelineGallery"] = "timelineGallery"
    data: TimelineGalleryBlockData = Field(default_factory=TimelineGalleryBlockData)


class AudioBlock(_Block):
    type: Literal["audio"] = "audio"
    data: AudioBlockData = Field(default_factory=AudioBlockData)


class VideoBlock(_Block):
    type: Literal["video"] = "video"
    data: VideoBlockData = Field(default_factory=VideoBlockData)


class QuoteBlock(_Block):
    type: Literal["quote"] = "quote"
    data: QuoteBlockData = Field(default_factory=QuoteBlockData)


class PositioningBlock(_Block):
    type: Literal["positioning"] = "positioning"
    data: PositioningBlockData = Field(default_factory=PositioningBlockData)


class MapBlock(_Block):
    type: Literal["map"] = "map"
    data: MapBlockData = Field(default_factory=MapBlockData)


class TourBlock(_Block):
    type: Literal["tour"] = "tour"
    data: TourBlockData = Field(default_factory=TourBlockData)


ContentBlock = Annotated[
    Union[
        TextBlock,
        ImageBlock,
        GalleryBlock,
        TimelineGalleryBlock,
        AudioBlock,
        VideoBlock,
        QuoteBlock,
        PositioningBlock,
        MapBlock,
        TourBlock,
    ],
    Field(discriminator="type"),
]

class StoredBlock(_Block):
    """A stored block that no longer matches its typed model.

    Kept verbatim so that saving the stop writes it back unchanged.
    """

    model_config = ConfigDict(extra="allow")

    type: str = ""
    data: dict[str, Any] = Field(default_factory=dict)


StopContent = Annotated[Union[ContentBlock, StoredBlock], Field(union_mode="left_to_right")]

BLOCK_TYPES: frozenset[str] = frozenset({
    "text", "image", "gallery", "timelineGallery", "audio",
    "video", "quote", "positioning", "map", "tour",
})

_content_adapter: TypeAdapter[list[ContentBlock]] = TypeAdapter(list[ContentBlock])
_stored_adapter: TypeAdapter[StopContent] = TypeAdapter(StopContent)
_stop_content_adapter: TypeAdapter[list[StopContent]] = TypeAdapter(list[StopContent])


def parse_content_blocks(raw: Any) -> list[ContentBlock]:
    """Validate a list of raw block dicts into typed blocks.

    Raises ``pydantic.ValidationError`` for unknown block types or
    malformed payloads.
    """
    return _content_adapter.validate_python(raw or [])


def parse_stop_content(raw: Any, stored: list[StopContent] | None = None) -> list[StopContent]:
    """Validate an edited block list against the blocks already on the stop.

    New and changed blocks must be typed blocks.  A block whose id matches
    a ``StoredBlock`` already on the stop is accepted as it is.
    """
    kept_ids = {block.id for block in stored or [] if isinstance(block, StoredBlock)}
    blocks: list[StopContent] = []
    for item in raw or []:
        if isinstance(item, dict) and item.get("id") in kept_ids:
            blocks.append(_stored_adapter.validate_python(item))
        else:
            blocks.extend(parse_content_blocks([item]))
    return blocks


def load_stored_block(item: Any) -> StopContent:
    """Typed block when *item* validates, otherwise a ``StoredBlock``."""
    return _stored_adapter.validate_python(item)


def dump_content_blocks(blocks: list[StopContent]) -> list[dict[str, Any]]:
    """Serialize blocks back to camelCase dicts for storage or the API."""
    return _stop_content_adapter.dump_python(blocks, mode="json", by_alias=True)
