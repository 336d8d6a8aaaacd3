"""QR positioning for stops: visitor URLs, tokens and unique short codes.

Every stop created through the API gets a QR positioning block:

    {"method": "qr_code",
     "url": "https://museum.example/visitor/tour/ancient-egypt/stop/rosetta?t=k3j9x0ab",
     "shortCode": "H7KQ2M"}

The token changes whenever the QR is regenerated, which invalidates
printed codes.  Short codes are unique across all stops; collisions are
retried a bounded number of times.
"""

from __future__ import annotations

from typing import Any

import structlog

from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.models.content import PositioningMethod
from tourstack.utils.errors import TourStackError
from tourstack.utils.slugs import build_visitor_url, generate_qr_token, generate_short_code

logger = structlog.get_logger(logger_name=__name__)

_MAX_SHORT_CODE_ATTEMPTS = 10


def build_qr_positioning(
    base_url: str,
    tour_slug: str,
    stop_slug: str,
    short_code: str,
    token: str | None = None,
) -> dict[str, Any]:
    return {
        "method": PositioningMethod.QR_CODE.value,
        "url": build_visitor_url(base_url, tour_slug, stop_slug, token or generate_qr_token()),
        "shortCode": short_code,
    }


async def allocate_short_code(store: ITourProvider, stop_id: str | None = None) -> str:
    """Return a short code no other stop holds.

    A code already held by *stop_id* itself counts as free.
    """
    for _ in range(_MAX_SHORT_CODE_ATTEMPTS):
        code = generate_short_code()
        holder = await store.find_stop_by_short_code(code)
        if holder is None or holder.id == stop_id:
            return code
        logger.debug("short_code_collision", code=code)
    raise TourStackError(message="Could not allocate a unique short code")
