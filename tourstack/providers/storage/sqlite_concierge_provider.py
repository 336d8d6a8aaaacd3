"""SQLite-backed AI concierge persistence.

Three tables: ``concierge_configs`` (one per museum in practice),
``concierge_knowledge`` and ``concierge_quick_actions``.  Children
reference their config with ``ON DELETE CASCADE``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from tourstack.interfaces.concierge_provider import IConciergeProvider
from tourstack.models.base import utc_now
from tourstack.models.concierge import ConciergeConfig, KnowledgeSource, QuickAction
from tourstack.utils.errors import NotFoundError
from tourstack.utils.json_fields import dump_json, load_json, load_localized

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/dev.db")

_CREATE_CONFIGS_TABLE = """\
CREATE TABLE IF NOT EXISTS concierge_configs (
    id                 TEXT PRIMARY KEY,
    museum_id          TEXT,
    enabled            INTEGER NOT NULL DEFAULT 0,
    persona            TEXT NOT NULL DEFAULT 'friendly',
    custom_persona     TEXT,
    welcome_message    TEXT NOT NULL,
    enabled_languages  TEXT NOT NULL DEFAULT '["en"]',
    created_at         TEXT NOT NULL,
    updated_at         TEXT NOT NULL
);
"""

_CREATE_KNOWLEDGE_TABLE = """\
CREATE TABLE IF NOT EXISTS concierge_knowledge (
    id               TEXT PRIMARY KEY,
    config_id        TEXT NOT NULL REFERENCES concierge_configs(id) ON DELETE CASCADE,
    source_type      TEXT NOT NULL,
    source_id        TEXT,
    title            TEXT NOT NULL,
    content          TEXT NOT NULL,
    character_count  INTEGER NOT NULL DEFAULT 0,
    priority         INTEGER NOT NULL DEFAULT 0,
    enabled          INTEGER NOT NULL DEFAULT 1,
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);
"""

_CREATE_QUICK_ACTIONS_TABLE = """\
CREATE TABLE IF NOT EXISTS concierge_quick_actions (
    id          TEXT PRIMARY KEY,
    config_id   TEXT NOT NULL REFERENCES concierge_configs(id) ON DELETE CASCADE,
    question    TEXT NOT NULL,
    category    TEXT NOT NULL,
    icon        TEXT,
    sort_order  INTEGER NOT NULL DEFAULT 0,
    enabled     INTEGER NOT NULL DEFAULT 1,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_knowledge_config ON concierge_knowledge(config_id, priority);",
    "CREATE INDEX IF NOT EXISTS idx_knowledge_source ON concierge_knowledge(config_id, source_type, source_id);",
    "CREATE INDEX IF NOT EXISTS idx_quick_actions_config ON concierge_quick_actions(config_id, sort_order);",
]

_INSERT_CONFIG = """\
INSERT INTO concierge_configs (id, museum_id, enabled, persona, custom_persona,
    welcome_message, enabled_languages, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_UPDATE_CONFIG = """\
UPDATE concierge_configs SET museum_id = ?, enabled = ?, persona = ?, custom_persona = ?,
    welcome_message = ?, enabled_languages = ?, updated_at = ?
WHERE id = ?;
"""

_INSERT_KNOWLEDGE = """\
INSERT INTO concierge_knowledge (id, config_id, source_type, source_id, title, content,
    character_count, priority, enabled, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_UPDATE_KNOWLEDGE = """\
UPDATE concierge_knowledge SET source_type = ?, source_id = ?, title = ?, content = ?,
    character_count = ?, priority = ?, enabled = ?, updated_at = ?
WHERE id = ?;
"""

_INSERT_QUICK_ACTION = """\
INSERT INTO concierge_quick_actions (id, config_id, question, category, icon, sort_order,
    enabled, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_UPDATE_QUICK_ACTION = """\
UPDATE concierge_quick_actions SET question = ?, category = ?, icon = ?, sort_order = ?,
    enabled = ?, updated_at = ?
WHERE id = ?;
"""

_SELECT_KNOWLEDGE = (
    "SELECT * FROM concierge_knowledge WHERE config_id = ? "
    "ORDER BY priority DESC, created_at ASC;"
)

_SELECT_QUICK_ACTIONS = (
    "SELECT * FROM concierge_quick_actions WHERE config_id = ? "
    "ORDER BY sort_order ASC, created_at ASC;"
)


class SQLiteConciergeProvider(IConciergeProvider):
    """Concierge config, knowledge sources and quick actions in SQLite."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys=ON;")
            yield db

    async def initialize(self) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self._connect() as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_CONFIGS_TABLE)
            await db.execute(_CREATE_KNOWLEDGE_TABLE)
            await db.execute(_CREATE_QUICK_ACTIONS_TABLE)
            for idx_sql in _CREATE_INDICES:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("concierge_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_concierge"

    # ── Config ─────────────────────────────────────────────────────────

    async def get_first_config(self) -> ConciergeConfig | None:
        return await self._load_config(
            "SELECT * FROM concierge_configs ORDER BY created_at ASC LIMIT 1;", ()
        )

    async def get_config(self, config_id: str) -> ConciergeConfig | None:
        return await self._load_config(
            "SELECT * FROM concierge_configs WHERE id = ?;", (config_id,)
        )

    async def create_config(self, config: ConciergeConfig) -> ConciergeConfig:
        async with self._connect() as db:
            await db.execute(_INSERT_CONFIG, (
                config.id,
                config.museum_id,
                int(config.enabled),
                config.persona,
                config.custom_persona,
                dump_json(config.welcome_message),
                dump_json(config.enabled_languages),
                config.created_at,
                config.updated_at,
            ))
            await db.commit()
        logger.info("concierge_config_created", config_id=config.id)
        return config

    async def update_config(self, config: ConciergeConfig) -> ConciergeConfig:
        updated = config.model_copy(update={"updated_at": utc_now()})
        async with self._connect() as db:
            cursor = await db.execute(_UPDATE_CONFIG, (
                updated.museum_id,
                int(updated.enabled),
                updated.persona,
                updated.custom_persona,
                dump_json(updated.welcome_message),
                dump_json(updated.enabled_languages),
                updated.updated_at,
                updated.id,
            ))
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(message="Config not found")
        return updated

    # ── Knowledge ──────────────────────────────────────────────────────

    async def list_knowledge(self, config_id: str) -> list[KnowledgeSource]:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_KNOWLEDGE, (config_id,))
            rows = await cursor.fetchall()
        return [self._row_to_knowledge(dict(r)) for r in rows]

    async def get_knowledge(self, knowledge_id: str) -> KnowledgeSource | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT * FROM concierge_knowledge WHERE id = ?;", (knowledge_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_knowledge(dict(row)) if row else None

    async def find_knowledge(
        self,
        config_id: str,
        source_type: str,
        source_id: str,
    ) -> KnowledgeSource | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT * FROM concierge_knowledge "
                "WHERE config_id = ? AND source_type = ? AND source_id = ? LIMIT 1;",
                (config_id, source_type, source_id),
            )
            row = await cursor.fetchone()
        return self._row_to_knowledge(dict(row)) if row else None

    async def create_knowledge(self, source: KnowledgeSource) -> KnowledgeSource:
        async with self._connect() as db:
            await db.execute(_INSERT_KNOWLEDGE, (
                source.id,
                source.config_id,
                source.source_type,
                source.source_id,
                source.title,
                source.content,
                source.character_count,
                source.priority,
                int(source.enabled),
                source.created_at,
                source.updated_at,
            ))
            await db.commit()
        logger.info(
            "knowledge_source_created",
            knowledge_id=source.id,
            source_type=source.source_type,
            character_count=source.character_count,
        )
        return source

    async def update_knowledge(self, source: KnowledgeSource) -> KnowledgeSource:
        updated = source.model_copy(update={"updated_at": utc_now()})
        async with self._connect() as db:
            cursor = await db.execute(_UPDATE_KNOWLEDGE, (
                updated.source_type,
                updated.source_id,
                updated.title,
                updated.content,
                updated.character_count,
                updated.priority,
                int(updated.enabled),
                updated.updated_at,
                updated.id,
            ))
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(message="Knowledge source not found")
        return updated

    async def delete_knowledge(self, knowledge_id: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute(
                "DELETE FROM concierge_knowledge WHERE id = ?;", (knowledge_id,)
            )
            await db.commit()
            return cursor.rowcount > 0

    # ── Quick actions ──────────────────────────────────────────────────

    async def list_quick_actions(self, config_id: str) -> list[QuickAction]:
        async with self._connect() as db:
            cursor = await db.execute(_SELECT_QUICK_ACTIONS, (config_id,))
            rows = await cursor.fetchall()
        return [self._row_to_quick_action(dict(r)) for r in rows]

    async def get_quick_action(self, action_id: str) -> QuickAction | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT * FROM concierge_quick_actions WHERE id = ?;", (action_id,)
            )
            row = await cursor.fetchone()
        return self._row_to_quick_action(dict(row)) if row else None

    async def max_quick_action_order(self, config_id: str) -> int | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT MAX(sort_order) AS max_order FROM concierge_quick_actions "
                "WHERE config_id = ?;",
                (config_id,),
            )
            row = await cursor.fetchone()
        return row["max_order"] if row else None

    async def create_quick_action(self, action: QuickAction) -> QuickAction:
        async with self._connect() as db:
            await db.execute(_INSERT_QUICK_ACTION, (
                action.id,
                action.config_id,
                dump_json(action.question),
                action.category,
                action.icon,
                action.order,
                int(action.enabled),
                action.created_at,
                action.updated_at,
            ))
            await db.commit()
        return action

    async def update_quick_action(self, action: QuickAction) -> QuickAction:
        updated = action.model_copy(update={"updated_at": utc_now()})
        async with self._connect() as db:
            cursor = await db.execute(_UPDATE_QUICK_ACTION, (
                dump_json(updated.question),
                updated.category,
                updated.icon,
                updated.order,
                int(updated.enabled),
                updated.updated_at,
                updated.id,
            ))
            await db.commit()
            if cursor.rowcount == 0:
                raise NotFoundError(message="Quick action not found")
        return updated

    async def delete_quick_action(self, action_id: str) -> bool:
        async with self._connect() as db:
            cursor = await db.execute(
                "DELETE FROM concierge_quick_actions WHERE id = ?;", (action_id,)
            )
            await db.commit()
            return cursor.rowcount > 0

    async def set_quick_action_orders(self, orders: dict[str, int]) -> None:
        now = utc_now()
        async with self._connect() as db:
            for action_id, order in orders.items():
                await db.execute(
                    "UPDATE concierge_quick_actions SET sort_order = ?, updated_at = ? WHERE id = ?;",
                    (order, now, action_id),
                )
            await db.commit()

    # ── Private helpers ────────────────────────────────────────────────

    async def _load_config(self, query: str, params: tuple[Any, ...]) -> ConciergeConfig | None:
        async with self._connect() as db:
            cursor = await db.execute(query, params)
            row = await cursor.fetchone()
            if row is None:
                return None
            config_id = row["id"]
            cursor = await db.execute(_SELECT_KNOWLEDGE, (config_id,))
            knowledge = [self._row_to_knowledge(dict(r)) for r in await cursor.fetchall()]
            cursor = await db.execute(_SELECT_QUICK_ACTIONS, (config_id,))
            actions = [self._row_to_quick_action(dict(r)) for r in await cursor.fetchall()]

        data = dict(row)
        return ConciergeConfig(
            id=data["id"],
            museum_id=data.get("museum_id"),
            enabled=bool(data.get("enabled")),
            persona=data.get("persona") or "friendly",
            custom_persona=data.get("custom_persona"),
            welcome_message=load_localized(data.get("welcome_message")),
            enabled_languages=load_json(data.get("enabled_languages"), ["en"]),
            knowledge_sources=knowledge,
            quick_actions=actions,
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )

    @staticmethod
    def _row_to_knowledge(row: dict[str, Any]) -> KnowledgeSource:
        return KnowledgeSource(
            id=row["id"],
            config_id=row["config_id"],
            source_type=row["source_type"],
            source_id=row.get("source_id"),
            title=row["title"],
            content=row["content"],
            character_count=row.get("character_count") or 0,
            priority=row.get("priority") or 0,
            enabled=bool(row.get("enabled")),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_quick_action(row: dict[str, Any]) -> QuickAction:
        return QuickAction(
            id=row["id"],
            config_id=row["config_id"],
            question=load_localized(row["question"]),
            category=row["category"],
            icon=row.get("icon"),
            order=row.get("sort_order") or 0,
            enabled=bool(row.get("enabled")),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
