"""HTTP layer: routers, middleware, auth and request schemas."""
