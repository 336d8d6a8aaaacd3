"""Slug, short-code and identifier helpers.

Visitor URLs look like ``/visitor/tour/{tour-slug}/stop/{stop-slug}?t={token}``
and every QR-positioned stop also carries a six-character short code that
can be typed in by hand.  Tour slugs are unique across all tours; stop
slugs are unique within their tour.  Both are made unique with the same
``base``, ``base-1``, ``base-2`` ... loop.
"""

from __future__ import annotations

import re
import secrets
import time
from collections.abc import Awaitable, Callable, Mapping

# No 0/O or 1/I so codes survive being read aloud or retyped.
SHORT_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
SHORT_CODE_LENGTH = 6

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_MAX_SLUG_LENGTH = 50

_INVALID_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_REPEATED_HYPHENS = re.compile(r"-+")


def generate_slug(title: str) -> str:
    """Turn a title into a URL slug.

    >>> generate_slug("The Ancient World: Egypt & Rome!")
    'the-ancient-world-egypt-rome'
    """
    slug = _INVALID_CHARS.sub("", title.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug[:_MAX_SLUG_LENGTH].strip("-")


def title_text(title: Mapping[str, str] | None, fallback: str) -> str:
    """Pick the text a slug is derived from: English, else the first non-empty value."""
    if not title:
        return fallback
    if title.get("en"):
        return title["en"]
    for value in title.values():
        if value:
            return value
    return fallback


def make_unique_slug(base: str, exists: Callable[[str], bool]) -> str:
    """Return ``base`` or the first free ``base-N`` according to *exists*.

    An empty base becomes ``untitled``.
    """
    root = base or "untitled"
    candidate = root
    counter = 1
    while exists(candidate):
        candidate = f"{root}-{counter}"
        counter += 1
    return candidate


async def make_unique_slug_async(
    base: str,
    exists: Callable[[str], Awaitable[bool]],
) -> str:
    """Async twin of :func:`make_unique_slug` for database-backed checks."""
    root = base or "untitled"
    candidate = root
    counter = 1
    while await exists(candidate):
        candidate = f"{root}-{counter}"
        counter += 1
    return candidate


def generate_short_code() -> str:
    """Six characters from :data:`SHORT_CODE_ALPHABET`."""
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(SHORT_CODE_LENGTH))


def _base36(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_qr_token() -> str:
    """Eight base36 characters appended to visitor URLs as ``?t=``."""
    return _base36(8)


def generate_item_id(prefix: str) -> str:
    """Client-style identifier, e.g. ``block_1718000000000_k3j9x0a``."""
    return f"{prefix}_{int(time.time() * 1000)}_{_base36(7)}"


def build_visitor_url(base_url: str, tour_slug: str, stop_slug: str, token: str) -> str:
    """Absolute visitor URL encoded into a stop's QR code."""
    return f"{base_url.rstrip('/')}/visitor/tour/{tour_slug}/stop/{stop_slug}?t={token}"


def build_visitor_path(tour_slug: str, stop_slug: str) -> str:
    """Relative visitor path returned by short-code lookups."""
    return f"/visitor/tour/{tour_slug}/stop/{stop_slug}"


def extract_token(url: str) -> str | None:
    """Return the ``t`` query value of a visitor URL, if present."""
    match = re.search(r"[?&]t=([^&#]+)", url or "")
    return match.group(1) if match else None
