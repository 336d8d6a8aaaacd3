"""Shared base class and helpers for TourStack domain models.

The admin and visitor SPAs speak camelCase JSON (``heroImage``,
``primaryLanguage``) while Python code uses snake_case.  ``TourStackModel``
bridges the two with a camelCase alias generator: models accept either
spelling on input and dump camelCase with ``by_alias=True`` (FastAPI does
this for ``response_model`` automatically).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Multilingual text: {"en": "Hello", "fr": "Bonjour"}.
LocalizedText = dict[str, str]


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string (the storage format for timestamps)."""
    return datetime.now(timezone.utc).isoformat()


class TourStackModel(BaseModel):
    """Frozen, camelCase-aliased base model.  Updates go through ``model_copy``."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_api(self) -> dict[str, Any]:
        """JSON-ready camelCase dict, as sent to the SPAs."""
        return self.model_dump(mode="json", by_alias=True)

    def merged(self, updates: dict[str, Any]) -> Self:
        """Validated copy with *updates* (snake_case keys) applied.

        Unlike ``model_copy(update=...)`` the result is re-validated, so
        enum strings, nested dicts and content blocks are coerced.
        """
        return type(self).model_validate({**self.model_dump(), **updates})
