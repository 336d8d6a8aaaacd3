"""structlog setup shared by the API server and the management CLI.

Both entry points call ``configure_logging`` once with values from
``Settings``: ``LOG_LEVEL`` and whether ``APP_ENV`` is production.
Production renders one JSON object per line; anything else gets the
coloured console renderer.

Log events routinely carry request bodies and provider config, so a
redaction processor masks password, secret and API-key fields before
rendering.  Standard-library records (uvicorn, httpx, aiosqlite) go
through the same chain.
"""

import logging
import sys
from typing import Any

import structlog

REDACTED = "***"

# Event keys whose values never reach the log output.
SENSITIVE_KEYS = frozenset({
    "password",
    "admin_password",
    "session_secret",
    "api_key",
    "apikey",
    "cookie",
    "authorization",
})

# httpx logs full request URLs at INFO, and Google APIs carry ``?key=``.
# aiosqlite logs every statement at DEBUG.
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def redact_secrets(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask values of sensitive keys, including keys nested one dict deep."""
    for key, value in event_dict.items():
        if key.lower() in SENSITIVE_KEYS and value:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if k.lower() in SENSITIVE_KEYS and v else v for k, v in value.items()
            }
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Render JSON lines instead of the console format.
                     Callers pass ``Settings.is_production``.

    Returns:
        The root structlog logger.
    """
    level = logging.getLevelName(log_level.upper())

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_secrets,
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    quiet_level = max(level, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Named logger; applies the default configuration if none has run yet."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
