"""Custom exception hierarchy for TourStack.

All application exceptions inherit from :class:`TourStackError`, which
carries an optional ``provider_name`` naming the external service (e.g.
"gemini", "deepgram", "google_translate") behind the failure, plus the
HTTP status the API layer answers with.

    TourStackError  (base, 500)
    +-- ValidationError          (400: missing or malformed input)
    +-- AuthenticationError      (401: no or invalid admin session)
    +-- NotFoundError            (404: unknown tour, stop, media, ...)
    +-- PayloadTooLargeError     (413: upload over the size limit)
    +-- RateLimitError           (429: provider rate-limit exceeded)
    +-- ConfigurationError       (500: missing API key or bad config)
    +-- LLMError                 (500: Gemini call failed)
    |   +-- LLMResponseParseError  (500: Gemini returned non-JSON)
    +-- ProviderUnavailableError (502: external service unreachable)
    +-- UpstreamError            (upstream status: service answered an error)

``ErrorHandlingMiddleware`` turns any of these into ``{"error": message}``
plus whatever :meth:`TourStackError.extra_payload` adds.
"""

from __future__ import annotations

from typing import Any


class TourStackError(Exception):
    """Base exception for all TourStack errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider in brackets for
    log output, e.g. ``[gemini] Rate limit exceeded``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def extra_payload(self) -> dict[str, Any]:
        """Additional keys merged into the JSON error body."""
        return {}

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Client errors
# ---------------------------------------------------------------------------


class ValidationError(TourStackError):
    """Raised when a request is missing required fields or carries bad values."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AuthenticationError(TourStackError):
    """Raised when the admin password or session cookie is rejected."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(TourStackError):
    """Raised when a tour, stop, media item or other record does not exist."""

    status_code = 404

    def __init__(
        self,
        message: str = "Not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PayloadTooLargeError(TourStackError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413

    def __init__(
        self,
        message: str = "File too large",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------


class RateLimitError(TourStackError):
    """Raised when an API rate limit is exceeded."""

    status_code = 429

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(TourStackError):
    """Raised when a required API key or setting is missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(TourStackError):
    """Raised when a Gemini API call fails or returns an unusable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMResponseParseError(LLMError):
    """Raised when a model or service reply cannot be used; keeps the raw reply."""

    def __init__(
        self,
        message: str = "Failed to parse AI response",
        provider_name: str | None = None,
        raw: Any = "",
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._raw = raw

    @property
    def raw(self) -> Any:
        return self._raw

    def extra_payload(self) -> dict[str, Any]:
        return {"raw": self._raw}


class ProviderUnavailableError(TourStackError):
    """Raised when an external service cannot be reached at all."""

    status_code = 502

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UpstreamError(TourStackError):
    """Raised when an external service answers with an error status.

    The upstream status code is passed through to the client together with
    the upstream error body under ``details``.
    """

    def __init__(
        self,
        message: str = "Upstream service returned an error",
        provider_name: str | None = None,
        status_code: int = 502,
        details: Any = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self.status_code = status_code
        self._details = details

    @property
    def details(self) -> Any:
        return self._details

    def extra_payload(self) -> dict[str, Any]:
        if self._details is None:
            return {}
        return {"details": self._details}
