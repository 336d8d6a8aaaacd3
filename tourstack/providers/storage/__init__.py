"""SQLite persistence providers.

All four providers share ``data/dev.db`` and each creates only its own
tables in ``initialize()``:

    SQLiteTourProvider       museums, templates, tours, stops
    SQLiteMediaProvider      media
    SQLiteCollectionProvider collections
    SQLiteConciergeProvider  concierge_configs, concierge_knowledge,
                             concierge_quick_actions
"""

from tourstack.providers.storage.sqlite_concierge_provider import SQLiteConciergeProvider
from tourstack.providers.storage.sqlite_media_provider import (
    SQLiteCollectionProvider,
    SQLiteMediaProvider,
)
from tourstack.providers.storage.sqlite_tour_provider import SQLiteTourProvider

__all__ = [
    "SQLiteCollectionProvider",
    "SQLiteConciergeProvider",
    "SQLiteMediaProvider",
    "SQLiteTourProvider",
]
