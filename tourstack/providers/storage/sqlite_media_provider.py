"""SQLite-backed media library and collection providers.

Both tables live in the shared ``data/dev.db``.  Follows the same
connection and DDL conventions as sqlite_tour_provider.py: module-level
SQL constants, one ``aiosqlite`` connection per operation, JSON TEXT
columns decoded into domain models at the boundary.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from tourstack.interfaces.media_provider import ICollectionProvider, IMediaProvider
from tourstack.models.base import utc_now
from tourstack.models.media import Collection, Media
from tourstack.utils.errors import NotFoundError
from tourstack.utils.json_fields import dump_json, load_json

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/dev.db")

_CREATE_MEDIA_TABLE = """\
CREATE TABLE IF NOT EXISTS media (
    id               TEXT PRIMARY KEY,
    filename         TEXT NOT NULL,
    mime_type        TEXT NOT NULL,
    size             INTEGER NOT NULL DEFAULT 0,
    url              TEXT NOT NULL,
    width            INTEGER,
    height           INTEGER,
    duration         REAL,
    alt              TEXT,
    caption          TEXT,
    tags             TEXT NOT NULL DEFAULT '[]',
    ai_metadata      TEXT,
    ai_translations  TEXT,
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);
"""

_CREATE_COLLECTIONS_TABLE = """\
CREATE TABLE IF NOT EXISTS collections (
    id               TEXT PRIMARY KEY,
    museum_id        TEXT,
    name             TEXT NOT NULL,
    description      TEXT NOT NULL DEFAULT '',
    type             TEXT NOT NULL DEFAULT 'gallery',
    items            TEXT NOT NULL DEFAULT '[]',
    source_language  TEXT,
    texts            TEXT,
    tts_settings     TEXT,
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_media_url ON media(url);",
    "CREATE INDEX IF NOT EXISTS idx_media_created ON media(created_at);",
    "CREATE INDEX IF NOT EXISTS idx_collections_type ON collections(type);",
    "CREATE INDEX IF NOT EXISTS idx_collections_updated ON collections(updated_at);",
]

_MEDIA_COLUMNS = (
    "id, filename, mime_type, size, url, width, height, duration, alt, caption, "
    "tags, ai_metadata, ai_translations, created_at, updated_at"
)

_INSERT_MEDIA = f"INSERT INTO media ({_MEDIA_COLUMNS}) VALUES ({', '.join('?' * 15)});"

_UPDATE_MEDIA = """\
UPDATE media SET filename = ?, mime_type = ?, size = ?, url = ?, width = ?, height = ?,
    duration = ?, alt = ?, caption = ?, tags = ?, ai_metadata = ?, ai_translations = ?,
    updated_at = ?
WHERE id = ?;
"""

_COLLECTION_COLUMNS = (
    "id, museum_id, name, description, type, items, source_language, texts, "
    "tts_settings, created_at, updated_at"
)

_INSERT_COLLECTION = (
    f"INSERT INTO collections ({_COLLECTION_COLUMNS}) VALUES ({', '.join('?' * 11)});"
)

_UPDATE_COLLECTION = """\
UPDATE collections SET museum_id = ?, name = ?, description = ?, type = ?, items = ?,
    source_language = ?, texts = ?, tts_settings = ?, updated_at = ?
WHERE id = ?;
"""


class _SQLiteBase:
    """Connection helper shared by the media and collection providers."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys=ON;")
            yield db

    async def _create(self, *statements: str) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self._connect() as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            for sql in statements:
                await db.execute(sql)
            await db.commit()


class SQLiteMediaProvider(_SQLiteBase, IMediaProvider):
    """Media library rows in the ``media`` table."""

    async def initialize(self) -> None:
        await self._create(_CREATE_MEDIA_TABLE, *_CREATE_INDICES[:2])
        logger.info("media_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_media"

    async def list_media(self) -> list[Media]:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_MEDIA_COLUMNS} FROM media ORDER BY created_at DESC;"
            )
            rows = await cursor.fetchall()
        return [self._row_to_media(dict(r)) for r in rows]

    async def get_media(self, media_id: str) -> Media | None:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_MEDIA_COLUMNS} FROM media WHERE id = ?;", (media_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_media(dict(row)) if row else None

    async def get_media_by_url(self, url: str) -> Media | None:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_MEDIA_COLUMNS} FROM media WHERE url = ? LIMIT 1;", (url,)
            )
            row = await cursor.fetchone()
        return self._row_to_media(dict(row)) if row else None

    async def list_urls(self) -> set[str]:
        async with self._connect() as db:
            cursor = await db.execute("SELECT url FROM media;")
            rows = await cursor.fetchall()
        return {row["url"] for row in rows}

    async def create_media(self, media: Media) -> Media:
        async with self._connect() as db:
            await db.execute(_INSERT_MEDIA, (
                media.id,
                *self._media_values(media),
                media.created_at,
                media.updated_at,
            ))
            await db.commit()
        logger.info("media_created", media_id=media.id, url=media.url, mime_type=media.mime_type)
        return media

    async def update_media(self, media: Media) -> Media:
        updated = media.model_copy(update={"updated_at": utc_now()})
        async with self._connect() as db:
            cursor = await db.execute(
                _UPDATE_MEDIA,
                (*self._media_values(updated), updated.updated_at, updated.id),
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(message="Media not found")
        return updated

    async def delete_media(self, media_id: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM media WHERE id = ?;", (media_id,))
            await db.commit()
            return cursor.rowcount > 0

    @staticmethod
    def _media_values(media: Media) -> tuple[Any, ...]:
        return (
            media.filename,
            media.mime_type,
            media.size,
            media.url,
            media.width,
            media.height,
            media.duration,
            media.alt,
            media.caption,
            dump_json(media.tags),
            dump_json(media.ai_metadata),
            dump_json(media.ai_translations),
        )

    @staticmethod
    def _row_to_media(row: dict[str, Any]) -> Media:
        return Media(
            id=row["id"],
            filename=row["filename"],
            mime_type=row["mime_type"],
            size=row.get("size") or 0,
            url=row["url"],
            width=row.get("width"),
            height=row.get("height"),
            duration=row.get("duration"),
            alt=row.get("alt"),
            caption=row.get("caption"),
            tags=load_json(row.get("tags"), []),
            ai_metadata=load_json(row.get("ai_metadata")),
            ai_translations=load_json(row.get("ai_translations")),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class SQLiteCollectionProvider(_SQLiteBase, ICollectionProvider):
    """Curated collections in the ``collections`` table."""

    async def initialize(self) -> None:
        await self._create(_CREATE_COLLECTIONS_TABLE, *_CREATE_INDICES[2:])
        logger.info("collection_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_collection"

    async def list_collections(
        self,
        *,
        collection_type: str | None = None,
        museum_id: str | None = None,
    ) -> list[Collection]:
        conditions: list[str] = []
        params: list[Any] = []
        if collection_type:
            conditions.append("type = ?")
            params.append(collection_type)
        if museum_id:
            conditions.append("museum_id = ?")
            params.append(museum_id)
        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_COLLECTION_COLUMNS} FROM collections {where_clause} "
                "ORDER BY updated_at DESC;",
                params,
            )
            rows = await cursor.fetchall()
        return [self._row_to_collection(dict(r)) for r in rows]

    async def get_collection(self, collection_id: str) -> Collection | None:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_COLLECTION_COLUMNS} FROM collections WHERE id = ?;",
                (collection_id,),
            )
            row = await cursor.fetchone()
        return self._row_to_collection(dict(row)) if row else None

    async def create_collection(self, collection: Collection) -> Collection:
        async with self._connect() as db:
            await db.execute(_INSERT_COLLECTION, (
                collection.id,
                *self._collection_values(collection),
                collection.created_at,
                collection.updated_at,
            ))
            await db.commit()
        logger.info("collection_created", collection_id=collection.id, type=collection.type)
        return collection

    async def update_collection(self, collection: Collection) -> Collection:
        updated = collection.model_copy(update={"updated_at": utc_now()})
        async with self._connect() as db:
            cursor = await db.execute(
                _UPDATE_COLLECTION,
                (*self._collection_values(updated), updated.updated_at, updated.id),
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(message="Collection not found")
        return updated

    async def delete_collection(self, collection_id: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM collections WHERE id = ?;", (collection_id,))
            await db.commit()
            return cursor.rowcount > 0

    @staticmethod
    def _collection_values(collection: Collection) -> tuple[Any, ...]:
        return (
            collection.museum_id,
            collection.name,
            collection.description,
            collection.type,
            dump_json(collection.items),
            collection.source_language,
            dump_json(collection.texts),
            dump_json(collection.tts_settings),
        )

    @staticmethod
    def _row_to_collection(row: dict[str, Any]) -> Collection:
        return Collection(
            id=row["id"],
            museum_id=row.get("museum_id"),
            name=row["name"],
            description=row.get("description") or "",
            type=row.get("type") or "gallery",
            items=load_json(row.get("items"), []),
            source_language=row.get("source_language"),
            texts=load_json(row.get("texts")),
            tts_settings=load_json(row.get("tts_settings")),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
