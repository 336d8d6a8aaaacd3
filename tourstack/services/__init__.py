"""Business logic between the API routes and the providers.

Services take snake_case dicts and domain models, enforce the authoring
rules (slugs, ordering, QR positioning, defaults) and raise
``tourstack.utils.errors`` exceptions that the API layer renders.
"""
