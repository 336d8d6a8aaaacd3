"""Unit tests for the error-shaping middleware and exception handlers."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from pydantic import BaseModel

from tourstack.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    register_exception_handlers,
)
from tourstack.models.tour import Tour
from tourstack.utils.errors import (
    LLMResponseParseError,
    NotFoundError,
    ProviderUnavailableError,
    UpstreamError,
)


class _Payload(BaseModel):
    name: str


def _make_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    @app.get("/missing")
    async def missing():
        raise NotFoundError(message="Tour not found")

    @app.get("/upstream")
    async def upstream():
        raise UpstreamError(message="Translation failed", status_code=503, details="quota")

    @app.get("/unreachable")
    async def unreachable():
        raise ProviderUnavailableError(message="Translation service unavailable")

    @app.get("/parse")
    async def parse():
        raise LLMResponseParseError(raw="not json")

    @app.get("/model")
    async def model():
        Tour(id="t", museum_id="m", template_id="x", status="bogus")

    @app.get("/http")
    async def http():
        raise HTTPException(status_code=409, detail="Slug taken")

    @app.post("/body")
    async def body(payload: _Payload):
        return {"name": payload.name}

    return app


client = TestClient(_make_app())


def test_not_found():
    response = client.get("/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "Tour not found"}


def test_upstream_status_and_details_passed_through():
    response = client.get("/upstream")
    assert response.status_code == 503
    assert response.json() == {"error": "Translation failed", "details": "quota"}


def test_unreachable_is_502():
    response = client.get("/unreachable")
    assert response.status_code == 502
    assert response.json() == {"error": "Translation service unavailable"}


def test_parse_error_keeps_raw():
    response = client.get("/parse")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to parse AI response", "raw": "not json"}


def test_model_validation_is_400():
    response = client.get("/model")
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request"
    assert body["details"][0]["loc"] == ["status"]


def test_http_exception_shape():
    response = client.get("/http")
    assert response.status_code == 409
    assert response.json() == {"error": "Slug taken"}


def test_request_validation_is_400():
    response = client.post("/body", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


def test_unknown_route_is_json_404():
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
