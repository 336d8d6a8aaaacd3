"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  — Static tunables checked into the repo
#                            (upload limits, MIME allow-list, model names)
#   2. .env file           — Local developer overrides (not committed)
#   3. Environment vars    — Set at deploy time
#
# The _deep_merge helper does recursive dict merging:
#   base = {"uploads": {"max_file_size_mb": 100}}
#   overrides = {"uploads": {"dir": "uploads"}}
#   result = {"uploads": {"max_file_size_mb": 100, "dir": "uploads"}}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from tourstack.config.settings import Settings

# Values used when config/config.yaml is absent (e.g. in an installed wheel).
_DEFAULTS: dict = {
    "uploads": {
        "max_file_size_mb": 100,
        "allowed_mime_types": [
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/webp",
            "image/svg+xml",
            "audio/mpeg",
            "audio/mp3",
            "audio/wav",
            "audio/ogg",
            "audio/webm",
            "video/mp4",
            "video/webm",
            "application/pdf",
        ],
    },
    "concierge": {
        "default_languages": ["en", "es", "fr", "de"],
        "preview_temperature": 0.7,
        "preview_max_tokens": 500,
    },
    "translation": {
        "cache_ttl_seconds": 3600,
        "cache_max_size": 256,
    },
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to draw overrides from; a fresh one is
            read from the environment when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config: dict = {}
    _deep_merge(config, _DEFAULTS)

    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "storage": {
            "database_path": settings.database_path,
            "settings_path": settings.settings_path,
            "uploads_dir": settings.uploads_dir,
            "knowledge_dir": settings.knowledge_dir,
        },
        "gemini": {
            "model": settings.gemini_model,
        },
        "services": {
            "configured": settings.get_configured_services(),
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(config, env_overrides)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        elif isinstance(value, dict):
            base[key] = {}
            _deep_merge(base[key], value)
        else:
            base[key] = value
