"""Image annotation providers."""

from tourstack.providers.vision.google_vision_provider import GoogleVisionProvider

__all__ = ["GoogleVisionProvider"]
