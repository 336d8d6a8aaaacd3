# =============================================================================
# tourstack/cli/__init__.py — CLI Module Overview
# =============================================================================
#
# Operator commands for a TourStack deployment, run with
# `python -m tourstack.cli <command>`:
#
#   init-db        Create every SQLite table (idempotent).
#   seed           Insert the seven built-in positioning templates.
#   migrate-slugs  Backfill missing tour/stop slugs and rewrite stop QR
#                  URLs to the slug form, keeping tokens and short codes.
#   serve          Run the API under uvicorn.
#
# Commands read the same .env / environment as the web app, so
# DATABASE_PATH decides which database they touch.
# =============================================================================
