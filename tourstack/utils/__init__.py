"""Utility modules for TourStack.

- **errors** -- Exception hierarchy rooted at TourStackError; each error
  knows the HTTP status the API answers with.
- **logging** -- structlog setup: coloured console output in development,
  JSON in production.
- **slugs** -- Slug generation, uniqueness loops, QR short codes and tokens.
- **json_fields** -- Tolerant encode/decode for JSON TEXT columns.
"""

from tourstack.utils.errors import (
    AuthenticationError,
    ConfigurationError,
    LLMError,
    LLMResponseParseError,
    NotFoundError,
    PayloadTooLargeError,
    ProviderUnavailableError,
    RateLimitError,
    TourStackError,
    UpstreamError,
    ValidationError,
)
from tourstack.utils.logging import configure_logging, get_logger

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "LLMError",
    "LLMResponseParseError",
    "NotFoundError",
    "PayloadTooLargeError",
    "ProviderUnavailableError",
    "RateLimitError",
    "TourStackError",
    "UpstreamError",
    "ValidationError",
    "configure_logging",
    "get_logger",
]
