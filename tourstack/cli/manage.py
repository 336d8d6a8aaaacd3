"""Database and server management commands.

Usage::

    python -m tourstack.cli init-db
    python -m tourstack.cli seed
    python -m tourstack.cli migrate-slugs
    python -m tourstack.cli serve --port 3000
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

import uvicorn

from tourstack.config.settings import Settings
from tourstack.providers.storage.sqlite_concierge_provider import SQLiteConciergeProvider
from tourstack.providers.storage.sqlite_media_provider import (
    SQLiteCollectionProvider,
    SQLiteMediaProvider,
)
from tourstack.providers.storage.sqlite_tour_provider import SQLiteTourProvider
from tourstack.services.slug_migration import SlugMigration
from tourstack.services.template_service import TemplateService
from tourstack.utils.logging import configure_logging


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_init_db(app_settings: Settings) -> int:
    db_path = app_settings.database_path
    for store in (
        SQLiteTourProvider(db_path=db_path),
        SQLiteMediaProvider(db_path=db_path),
        SQLiteCollectionProvider(db_path=db_path),
        SQLiteConciergeProvider(db_path=db_path),
    ):
        await store.initialize()
    print(f"Database ready: {db_path}")
    return 0


async def _handle_seed(app_settings: Settings) -> int:
    store = SQLiteTourProvider(db_path=app_settings.database_path)
    await store.initialize()
    created = await TemplateService(store).seed_built_in()
    print(f"Templates seeded: {created} created")
    return 0


async def _handle_migrate_slugs(app_settings: Settings) -> int:
    store = SQLiteTourProvider(db_path=app_settings.database_path)
    await store.initialize()
    result = await SlugMigration(store).run()
    print("Slug migration complete")
    print(f"  Tours updated:  {result['tours']}")
    print(f"  Stops updated:  {result['stops']}")
    return 0


def _handle_serve(args: argparse.Namespace, app_settings: Settings) -> int:
    uvicorn.run(
        "tourstack.main:app",
        host=args.host or app_settings.app_host,
        port=args.port or app_settings.app_port,
        reload=args.reload,
    )
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m tourstack.cli",
        description="Manage a TourStack database and server.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Management commands")

    subparsers.add_parser("init-db", help="Create the database schema")
    subparsers.add_parser("seed", help="Seed the built-in positioning templates")
    subparsers.add_parser(
        "migrate-slugs", help="Backfill slugs and rewrite QR URLs to the slug form"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: APP_HOST)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: APP_PORT)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> int:
    """Parse *argv* and run one command; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    app_settings = Settings()
    configure_logging(log_level=app_settings.log_level, json_output=app_settings.is_production)

    if args.command == "init-db":
        return asyncio.run(_handle_init_db(app_settings))
    if args.command == "seed":
        return asyncio.run(_handle_seed(app_settings))
    if args.command == "migrate-slugs":
        return asyncio.run(_handle_migrate_slugs(app_settings))
    if args.command == "serve":
        return _handle_serve(args, app_settings)

    parser.print_help()
    return 1
