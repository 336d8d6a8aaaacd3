"""HTTP routers, one module per resource.

``ALL_ROUTERS`` is what ``main.create_app`` includes, in this order.
"""

from tourstack.api.routes import (
    ai,
    auth,
    chat,
    collections,
    concierge,
    feeds,
    health,
    media,
    settings,
    stops,
    templates,
    tours,
    transcribe,
    translate,
    visitor,
)

ALL_ROUTERS = (
    health.router,
    auth.router,
    tours.router,
    stops.router,
    templates.router,
    visitor.router,
    media.router,
    collections.router,
    settings.router,
    concierge.router,
    chat.router,
    ai.router,
    translate.router,
    translate.google_router,
    transcribe.router,
    feeds.router,
)
