"""Settings store providers."""

from tourstack.providers.settings.json_settings_provider import (
    DEFAULT_SETTINGS,
    JSONSettingsProvider,
)

__all__ = ["DEFAULT_SETTINGS", "JSONSettingsProvider"]
