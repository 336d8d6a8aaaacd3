"""SQLite-backed persistence for museums, templates, tours and stops.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing ITourProvider).
# Pattern: Adapter pattern — wraps SQLite behind the ITourProvider ABC
#          so the persistence backend can be swapped without touching
#          the services.
#
# Database: ``data/dev.db`` — shared with the media, collection and
# concierge providers; each provider creates only its own tables.
#
# Storage conventions:
#   - Multilingual text, positioning configs, content blocks and other
#     structures are JSON TEXT columns, decoded in ``_row_to_*``.
#   - Stop order lives in ``sort_order`` (ORDER is an SQL keyword).
#   - ``stops.short_code`` mirrors ``primaryPositioning.shortCode`` for
#     QR stops, upper-cased and indexed, so short-code lookup is a
#     single indexed query.
#   - ``PRAGMA foreign_keys=ON`` on every connection makes deleting a
#     tour cascade to its stops.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from tourstack.interfaces.tour_provider import ITourProvider
from tourstack.models.base import utc_now
from tourstack.models.content import (
    StopContent,
    StoredBlock,
    dump_content_blocks,
    load_stored_block,
)
from tourstack.models.template import Template
from tourstack.models.tour import Museum, Stop, Tour
from tourstack.utils.errors import NotFoundError
from tourstack.utils.json_fields import dump_json, load_json, load_localized

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/dev.db")

# ── Schema DDL ────────────────────────────────────────────────────────

_CREATE_MUSEUMS_TABLE = """\
CREATE TABLE IF NOT EXISTS museums (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    location    TEXT,
    logo        TEXT,
    branding    TEXT NOT NULL DEFAULT '{}',
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_CREATE_TEMPLATES_TABLE = """\
CREATE TABLE IF NOT EXISTS templates (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    description   TEXT NOT NULL DEFAULT '',
    icon          TEXT NOT NULL DEFAULT '',
    built_in      INTEGER NOT NULL DEFAULT 0,
    custom_fields TEXT NOT NULL DEFAULT '[]',
    created_at    TEXT NOT NULL,
    updated_at    TEXT NOT NULL
);
"""

_CREATE_TOURS_TABLE = """\
CREATE TABLE IF NOT EXISTS tours (
    id                          TEXT PRIMARY KEY,
    museum_id                   TEXT NOT NULL REFERENCES museums(id),
    template_id                 TEXT NOT NULL REFERENCES templates(id),
    status                      TEXT NOT NULL DEFAULT 'draft',
    title                       TEXT NOT NULL,
    hero_image                  TEXT NOT NULL DEFAULT '',
    description                 TEXT NOT NULL,
    languages                   TEXT NOT NULL DEFAULT '["en"]',
    primary_language            TEXT NOT NULL DEFAULT 'en',
    duration                    INTEGER NOT NULL DEFAULT 30,
    difficulty                  TEXT NOT NULL DEFAULT 'general',
    primary_positioning_method  TEXT NOT NULL DEFAULT 'qr_code',
    backup_positioning_method   TEXT,
    accessibility               TEXT NOT NULL DEFAULT '{}',
    published_at                TEXT,
    scheduled_publish_at        TEXT,
    version                     INTEGER NOT NULL DEFAULT 1,
    slug                        TEXT,
    concierge_enabled           INTEGER NOT NULL DEFAULT 0,
    concierge_persona           TEXT,
    concierge_welcome           TEXT,
    concierge_collections       TEXT NOT NULL DEFAULT '[]',
    concierge_quick_actions     TEXT NOT NULL DEFAULT '[]',
    created_at                  TEXT NOT NULL,
    updated_at                  TEXT NOT NULL
);
"""

_CREATE_STOPS_TABLE = """\
CREATE TABLE IF NOT EXISTS stops (
    id                   TEXT PRIMARY KEY,
    tour_id              TEXT NOT NULL REFERENCES tours(id) ON DELETE CASCADE,
    sort_order           INTEGER NOT NULL DEFAULT 0,
    type                 TEXT NOT NULL DEFAULT 'mandatory',
    title                TEXT NOT NULL,
    image                TEXT NOT NULL DEFAULT '',
    description          TEXT NOT NULL,
    custom_field_values  TEXT NOT NULL DEFAULT '{}',
    primary_positioning  TEXT NOT NULL DEFAULT '{}',
    backup_positioning   TEXT,
    triggers             TEXT NOT NULL DEFAULT '{}',
    content              TEXT NOT NULL DEFAULT '[]',
    interactive          TEXT,
    links                TEXT NOT NULL DEFAULT '[]',
    accessibility        TEXT NOT NULL DEFAULT '{}',
    slug                 TEXT,
    short_code           TEXT,
    created_at           TEXT NOT NULL,
    updated_at           TEXT NOT NULL
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_tours_updated ON tours(updated_at);",
    "CREATE INDEX IF NOT EXISTS idx_tours_hero ON tours(hero_image);",
    "CREATE INDEX IF NOT EXISTS idx_tours_slug ON tours(slug);",
    "CREATE INDEX IF NOT EXISTS idx_stops_tour_slug ON stops(tour_id, slug);",
    "CREATE INDEX IF NOT EXISTS idx_stops_tour_order ON stops(tour_id, sort_order);",
    "CREATE INDEX IF NOT EXISTS idx_stops_short_code ON stops(short_code);",
    "CREATE INDEX IF NOT EXISTS idx_templates_name ON templates(name);",
]

# ── DML ───────────────────────────────────────────────────────────────

_TOUR_COLUMNS = (
    "id, museum_id, template_id, status, title, hero_image, description, languages, "
    "primary_language, duration, difficulty, primary_positioning_method, "
    "backup_positioning_method, accessibility, published_at, scheduled_publish_at, "
    "version, slug, concierge_enabled, concierge_persona, concierge_welcome, "
    "concierge_collections, concierge_quick_actions, created_at, updated_at"
)

_STOP_COLUMNS = (
    "id, tour_id, sort_order, type, title, image, description, custom_field_values, "
    "primary_positioning, backup_positioning, triggers, content, interactive, links, "
    "accessibility, slug, short_code, created_at, updated_at"
)

_INSERT_TOUR = f"INSERT INTO tours ({_TOUR_COLUMNS}) VALUES ({', '.join('?' * 25)});"

_UPDATE_TOUR = """\
UPDATE tours SET museum_id = ?, template_id = ?, status = ?, title = ?, hero_image = ?,
    description = ?, languages = ?, primary_language = ?, duration = ?, difficulty = ?,
    primary_positioning_method = ?, backup_positioning_method = ?, accessibility = ?,
    published_at = ?, scheduled_publish_at = ?, version = ?, slug = ?,
    concierge_enabled = ?, concierge_persona = ?, concierge_welcome = ?,
    concierge_collections = ?, concierge_quick_actions = ?, updated_at = ?
WHERE id = ?;
"""

_INSERT_STOP = f"INSERT INTO stops ({_STOP_COLUMNS}) VALUES ({', '.join('?' * 19)});"

_UPDATE_STOP = """\
UPDATE stops SET sort_order = ?, type = ?, title = ?, image = ?, description = ?,
    custom_field_values = ?, primary_positioning = ?, backup_positioning = ?,
    triggers = ?, content = ?, interactive = ?, links = ?, accessibility = ?,
    slug = ?, short_code = ?, updated_at = ?
WHERE id = ?;
"""

_UPSERT_TEMPLATE = """\
INSERT INTO templates (id, name, description, icon, built_in, custom_fields, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET name = excluded.name,
                              description = excluded.description,
                              icon = excluded.icon,
                              built_in = excluded.built_in,
                              custom_fields = excluded.custom_fields,
                              updated_at = excluded.updated_at;
"""

_SELECT_STOPS_FOR_TOUR = (
    f"SELECT {_STOP_COLUMNS} FROM stops WHERE tour_id = ? ORDER BY sort_order ASC, created_at ASC;"
)


class SQLiteTourProvider(ITourProvider):
    """SQLite-backed authoring store for museums, templates, tours and stops."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys=ON;")
            yield db

    async def initialize(self) -> None:
        """Create the authoring tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self._connect() as db:
            # WAL mode enables concurrent readers while a writer is active.
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_MUSEUMS_TABLE)
            await db.execute(_CREATE_TEMPLATES_TABLE)
            await db.execute(_CREATE_TOURS_TABLE)
            await db.execute(_CREATE_STOPS_TABLE)
            for idx_sql in _CREATE_INDICES:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("tour_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_tour"

    # ── Museums ────────────────────────────────────────────────────────

    async def get_first_museum(self) -> Museum | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT * FROM museums ORDER BY created_at ASC LIMIT 1;"
            )
            row = await cursor.fetchone()
        return self._row_to_museum(dict(row)) if row else None

    async def create_museum(self, museum: Museum) -> Museum:
        async with self._connect() as db:
            await db.execute(
                "INSERT INTO museums (id, name, location, logo, branding, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?);",
                (
                    museum.id,
                    museum.name,
                    museum.location,
                    museum.logo,
                    dump_json(museum.branding),
                    museum.created_at,
                    museum.updated_at,
                ),
            )
            await db.commit()
        logger.info("museum_created", museum_id=museum.id, name=museum.name)
        return museum

    # ── Templates ──────────────────────────────────────────────────────

    async def list_templates(self) -> list[Template]:
        async with self._connect() as db:
            cursor = await db.execute("SELECT * FROM templates ORDER BY name ASC;")
            rows = await cursor.fetchall()
        return [self._row_to_template(dict(r)) for r in rows]

    async def get_template(self, template_id: str) -> Template | None:
        async with self._connect() as db:
            cursor = await db.execute("SELECT * FROM templates WHERE id = ?;", (template_id,))
            row = await cursor.fetchone()
        return self._row_to_template(dict(row)) if row else None

    async def find_template(self, name: str, built_in: bool) -> Template | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT * FROM templates WHERE name = ? AND built_in = ? LIMIT 1;",
                (name, int(built_in)),
            )
            row = await cursor.fetchone()
        return self._row_to_template(dict(row)) if row else None

    async def save_template(self, template: Template) -> Template:
        fields = [f.model_dump(mode="json", by_alias=True, exclude_none=True) for f in template.custom_fields]
        async with self._connect() as db:
            await db.execute(_UPSERT_TEMPLATE, (
                template.id,
                template.name,
                template.description,
                template.icon,
                int(template.built_in),
                dump_json(fields),
                template.created_at,
                template.updated_at,
            ))
            await db.commit()
        return template

    # ── Tours ──────────────────────────────────────────────────────────

    async def list_tours(self) -> list[Tour]:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_TOUR_COLUMNS} FROM tours ORDER BY updated_at DESC;"
            )
            rows = await cursor.fetchall()
            tours: list[Tour] = []
            for row in rows:
                stops = await self._stops_for_tour(db, row["id"])
                tours.append(self._row_to_tour(dict(row), stops))
        return tours

    async def get_tour(self, tour_id: str) -> Tour | None:
        return await self._get_tour_where("id = ?", tour_id)

    async def get_tour_by_slug(self, slug: str) -> Tour | None:
        return await self._get_tour_where("slug = ?", slug)

    async def tour_slug_exists(self, slug: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute("SELECT 1 FROM tours WHERE slug = ? LIMIT 1;", (slug,))
            return await cursor.fetchone() is not None

    async def create_tour(self, tour: Tour) -> Tour:
        async with self._connect() as db:
            await db.execute(_INSERT_TOUR, (tour.id, *self._tour_values(tour), tour.created_at, tour.updated_at))
            await db.commit()
        logger.info("tour_created", tour_id=tour.id, slug=tour.slug)
        return tour

    async def update_tour(self, tour: Tour) -> Tour:
        updated = tour.model_copy(update={"updated_at": utc_now()})
        async with self._connect() as db:
            cursor = await db.execute(
                _UPDATE_TOUR,
                (*self._tour_values(updated), updated.updated_at, updated.id),
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(message="Tour not found")
        return updated

    async def delete_tour(self, tour_id: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM tours WHERE id = ?;", (tour_id,))
            await db.commit()
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("tour_deleted", tour_id=tour_id)
        return deleted

    async def tours_using_hero_image(self, url: str) -> list[Tour]:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_TOUR_COLUMNS} FROM tours WHERE hero_image = ?;", (url,)
            )
            rows = await cursor.fetchall()
        return [self._row_to_tour(dict(r), []) for r in rows]

    # ── Stops ──────────────────────────────────────────────────────────

    async def list_stops(self, tour_id: str) -> list[Stop]:
        async with self._connect() as db:
            return await self._stops_for_tour(db, tour_id)

    async def list_all_stops(self) -> list[Stop]:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_STOP_COLUMNS} FROM stops ORDER BY tour_id, sort_order ASC;"
            )
            rows = await cursor.fetchall()
        return [self._row_to_stop(dict(r)) for r in rows]

    async def get_stop(self, stop_id: str) -> Stop | None:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_STOP_COLUMNS} FROM stops WHERE id = ?;", (stop_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_stop(dict(row)) if row else None

    async def get_stop_by_slug(self, tour_id: str, slug: str) -> Stop | None:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_STOP_COLUMNS} FROM stops WHERE tour_id = ? AND slug = ?;",
                (tour_id, slug),
            )
            row = await cursor.fetchone()
        return self._row_to_stop(dict(row)) if row else None

    async def find_stop_by_short_code(self, short_code: str) -> Stop | None:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_STOP_COLUMNS} FROM stops WHERE short_code = ? LIMIT 1;",
                (short_code.upper(),),
            )
            row = await cursor.fetchone()
        return self._row_to_stop(dict(row)) if row else None

    async def stop_slug_exists(self, tour_id: str, slug: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT 1 FROM stops WHERE tour_id = ? AND slug = ? LIMIT 1;",
                (tour_id, slug),
            )
            return await cursor.fetchone() is not None

    async def max_stop_order(self, tour_id: str) -> int | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT MAX(sort_order) AS max_order FROM stops WHERE tour_id = ?;",
                (tour_id,),
            )
            row = await cursor.fetchone()
        return row["max_order"] if row else None

    async def create_stop(self, stop: Stop) -> Stop:
        async with self._connect() as db:
            await db.execute(_INSERT_STOP, (
                stop.id,
                stop.tour_id,
                stop.order,
                *self._stop_values(stop),
                stop.created_at,
                stop.updated_at,
            ))
            await db.commit()
        logger.info("stop_created", stop_id=stop.id, tour_id=stop.tour_id, slug=stop.slug)
        return stop

    async def update_stop(self, stop: Stop) -> Stop:
        updated = stop.model_copy(update={"updated_at": utc_now()})
        async with self._connect() as db:
            cursor = await db.execute(
                _UPDATE_STOP,
                (updated.order, *self._stop_values(updated), updated.updated_at, updated.id),
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(message="Stop not found")
        return updated

    async def delete_stop(self, stop_id: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute("DELETE FROM stops WHERE id = ?;", (stop_id,))
            await db.commit()
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("stop_deleted", stop_id=stop_id)
        return deleted

    async def set_stop_orders(self, tour_id: str, stop_ids: list[str]) -> None:
        now = utc_now()
        async with self._connect() as db:
            for index, stop_id in enumerate(stop_ids):
                await db.execute(
                    "UPDATE stops SET sort_order = ?, updated_at = ? WHERE id = ? AND tour_id = ?;",
                    (index, now, stop_id, tour_id),
                )
            await db.commit()
        logger.info("stops_reordered", tour_id=tour_id, count=len(stop_ids))

    # ── Private helpers ────────────────────────────────────────────────

    async def _get_tour_where(self, clause: str, value: str) -> Tour | None:
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_TOUR_COLUMNS} FROM tours WHERE {clause};", (value,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            stops = await self._stops_for_tour(db, row["id"])
        return self._row_to_tour(dict(row), stops)

    async def _stops_for_tour(self, db: aiosqlite.Connection, tour_id: str) -> list[Stop]:
        cursor = await db.execute(_SELECT_STOPS_FOR_TOUR, (tour_id,))
        rows = await cursor.fetchall()
        return [self._row_to_stop(dict(r)) for r in rows]

    @staticmethod
    def _tour_values(tour: Tour) -> tuple[Any, ...]:
        """Column values from museum_id through concierge_quick_actions."""
        return (
            tour.museum_id,
            tour.template_id,
            tour.status.value,
            dump_json(tour.title),
            tour.hero_image,
            dump_json(tour.description),
            dump_json(tour.languages),
            tour.primary_language,
            tour.duration,
            tour.difficulty.value,
            tour.primary_positioning_method.value,
            tour.backup_positioning_method.value if tour.backup_positioning_method else None,
            dump_json(tour.accessibility.model_dump(by_alias=True)),
            tour.published_at,
            tour.scheduled_publish_at,
            tour.version,
            tour.slug,
            int(tour.concierge_enabled),
            tour.concierge_persona,
            dump_json(tour.concierge_welcome),
            dump_json(tour.concierge_collections),
            dump_json(tour.concierge_quick_actions),
        )

    @staticmethod
    def _stop_values(stop: Stop) -> tuple[Any, ...]:
        """Column values from type through short_code."""
        image = stop.image if isinstance(stop.image, str) else dump_json(stop.image)
        return (
            stop.type.value,
            dump_json(stop.title),
            image,
            dump_json(stop.description),
            dump_json(stop.custom_field_values),
            dump_json(stop.primary_positioning),
            dump_json(stop.backup_positioning),
            dump_json(stop.triggers),
            dump_json(dump_content_blocks(stop.content)),
            dump_json(stop.interactive),
            dump_json(stop.links),
            dump_json(stop.accessibility),
            stop.slug,
            stop.short_code,
        )

    @staticmethod
    def _row_to_museum(row: dict[str, Any]) -> Museum:
        return Museum(
            id=row["id"],
            name=row["name"],
            location=row.get("location"),
            logo=row.get("logo"),
            branding=load_json(row.get("branding"), {}),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_template(row: dict[str, Any]) -> Template:
        return Template(
            id=row["id"],
            name=row["name"],
            description=row.get("description") or "",
            icon=row.get("icon") or "",
            built_in=bool(row.get("built_in")),
            custom_fields=load_json(row.get("custom_fields"), []),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_tour(row: dict[str, Any], stops: list[Stop]) -> Tour:
        return Tour(
            id=row["id"],
            museum_id=row["museum_id"],
            template_id=row["template_id"],
            status=row["status"],
            title=load_localized(row["title"]),
            hero_image=row.get("hero_image") or "",
            description=load_localized(row["description"]),
            languages=load_json(row.get("languages"), ["en"]),
            primary_language=row.get("primary_language") or "en",
            duration=row.get("duration") or 0,
            difficulty=row["difficulty"],
            primary_positioning_method=row["primary_positioning_method"],
            backup_positioning_method=row.get("backup_positioning_method"),
            accessibility=load_json(row.get("accessibility"), {}),
            published_at=row.get("published_at"),
            scheduled_publish_at=row.get("scheduled_publish_at"),
            version=row.get("version") or 1,
            slug=row.get("slug"),
            concierge_enabled=bool(row.get("concierge_enabled")),
            concierge_persona=row.get("concierge_persona"),
            concierge_welcome=load_json(row.get("concierge_welcome")),
            concierge_collections=load_json(row.get("concierge_collections"), []),
            concierge_quick_actions=load_json(row.get("concierge_quick_actions"), []),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            stops=stops,
        )

    @staticmethod
    def _row_to_stop(row: dict[str, Any]) -> Stop:
        raw_image = row.get("image") or ""
        image = load_json(raw_image, raw_image) if raw_image.startswith("{") else raw_image
        return Stop(
            id=row["id"],
            tour_id=row["tour_id"],
            order=row.get("sort_order") or 0,
            type=row["type"],
            title=load_localized(row["title"]),
            image=image,
            description=load_localized(row["description"]),
            custom_field_values=load_json(row.get("custom_field_values"), {}),
            primary_positioning=load_json(row.get("primary_positioning"), {}),
            backup_positioning=load_json(row.get("backup_positioning")),
            triggers=load_json(row.get("triggers"), {}),
            content=_load_blocks(row["id"], row.get("content")),
            interactive=load_json(row.get("interactive")),
            links=load_json(row.get("links"), []),
            accessibility=load_json(row.get("accessibility"), {}),
            slug=row.get("slug"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


def _load_blocks(stop_id: str, text: str | None) -> list[StopContent]:
    """Decode stored content blocks.

    A block that no longer validates is kept as a ``StoredBlock`` so the
    next save writes it back unchanged.
    """
    raw = load_json(text, [])
    if not isinstance(raw, list):
        return []
    blocks: list[StopContent] = []
    for item in raw:
        if not isinstance(item, dict):
            logger.warning("content_block_skipped", stop_id=stop_id)
            continue
        block = load_stored_block(item)
        if isinstance(block, StoredBlock):
            logger.warning("content_block_kept_raw", stop_id=stop_id, block_type=block.type)
        blocks.append(block)
    return blocks
