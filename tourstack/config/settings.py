"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# pydantic-settings reads configuration from two sources (in priority order):
#
#   1. **Environment variables**, e.g. GEMINI_API_KEY=abc123 (always wins)
#   2. **.env file** in the project root (local development)
#
# The mapping is automatic: field ``gemini_api_key`` maps to env var
# ``GEMINI_API_KEY``.  Defaults apply when neither source sets a value.
#
# An empty API key means "not configured".  The matching provider stays
# constructed but reports ``is_available() == False`` and the routes that
# need it answer with a configuration error instead of calling out.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """TourStack application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # === Admin Auth ===
    # ADMIN_PASSWORD falls back to "admin" with a startup warning.
    # SESSION_SECRET falls back to a random per-process secret, which means
    # sessions do not survive a restart.
    admin_password: str = ""
    session_secret: str = ""
    session_ttl_hours: int = 168

    # === AI Services ===
    # The admin SPA historically exposed the Gemini key as VITE_GEMINI_API_KEY;
    # both names are accepted.
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "VITE_GEMINI_API_KEY", "gemini_api_key"),
    )
    gemini_model: str = "gemini-2.0-flash"
    google_vision_api_key: str = ""
    google_translate_api_key: str = ""  # Falls back to the Vision key when empty

    # === Maps / Transcription ===
    google_maps_api_key: str = ""
    deepgram_api_key: str = ""
    whisper_endpoint: str = ""  # Self-hosted Whisper, OpenAI-compatible form upload
    elevenlabs_api_key: str = ""

    # === Translation ===
    # Set LIBRE_TRANSLATE_URL=mock to get "[XX] " prefixed fake translations.
    libre_translate_url: str = "https://translate.supersoul.top/translate"
    libre_translate_api_key: str = ""

    # === Storage Paths ===
    database_path: str = "data/dev.db"
    settings_path: str = "data/settings.json"
    uploads_dir: str = "uploads"
    knowledge_dir: str = "uploads/knowledge"

    # Base for generated visitor URLs.  Empty = derive from the request origin.
    public_base_url: str = ""

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = ""  # Comma-separated; empty = allow all

    @property
    def translate_api_key(self) -> str:
        """Google Translate key, sharing the Vision key when no dedicated key is set."""
        return self.google_translate_api_key or self.google_vision_api_key

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    def get_cors_origins(self) -> list[str]:
        """Return the configured CORS origins as a list (empty = all)."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_configured_services(self) -> list[str]:
        """Return the external services that have credentials configured."""
        services: list[str] = []
        if self.gemini_api_key:
            services.append("gemini")
        if self.google_vision_api_key:
            services.append("google_vision")
        if self.translate_api_key:
            services.append("google_translate")
        if self.libre_translate_url:
            services.append("libretranslate")
        if self.deepgram_api_key:
            services.append("deepgram")
        if self.whisper_endpoint:
            services.append("whisper")
        return services
