"""Integration tests for the TourStack API using TestClient.

The real application is built by ``create_app`` against a temporary
SQLite file and uploads directory.  Only the Gemini/Translate-backed
services are replaced, with versions wired to mocked providers.
"""

from __future__ import annotations

import io
import json

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from tourstack.config.settings import Settings
from tourstack.main import create_app
from tourstack.providers.storage.sqlite_concierge_provider import SQLiteConciergeProvider
from tourstack.providers.storage.sqlite_media_provider import SQLiteCollectionProvider
from tourstack.services.chat_service import ChatService
from tourstack.services.concierge_service import ConciergeService

PASSWORD = "gallery-admin"
BASE_URL = "https://museum.example"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (64, 48), color=(10, 120, 200)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_path=str(tmp_path / "tourstack.db"),
        settings_path=str(tmp_path / "settings.json"),
        uploads_dir=str(tmp_path / "uploads"),
        knowledge_dir=str(tmp_path / "knowledge"),
        admin_password=PASSWORD,
        session_secret="integration-secret",
        public_base_url=BASE_URL,
        libre_translate_url="mock",
    )


@pytest.fixture
def client(app_settings, mock_llm, mock_translator, tmp_path):
    knowledge = tmp_path / "knowledge"
    knowledge.mkdir()
    (knowledge / "hours.txt").write_text("Open Tuesday to Sunday, 10-18.", encoding="utf-8")

    overrides = {
        "chat_service": ChatService(mock_llm, mock_translator, knowledge),
        "concierge_service": ConciergeService(
            SQLiteConciergeProvider(db_path=app_settings.database_path),
            SQLiteCollectionProvider(db_path=app_settings.database_path),
            mock_llm,
            mock_translator,
        ),
    }
    app = create_app(app_settings, overrides=overrides)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(client):
    response = client.post("/api/auth/login", json={"password": PASSWORD})
    assert response.status_code == 200
    return client


def _create_tour(client, title: str = "Ancient Egypt") -> dict:
    response = client.post("/api/tours", json={"title": {"en": title}})
    assert response.status_code == 201
    return response.json()


def _create_stop(client, tour_id: str, title: str) -> dict:
    response = client.post("/api/stops", json={"tourId": tour_id, "title": {"en": title}})
    assert response.status_code == 201
    return response.json()


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestAuth:
    def test_health_is_public(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_admin_routes_need_session(self, client):
        response = client.get("/api/tours")
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_wrong_password(self, client):
        response = client.post("/api/auth/login", json={"password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid password"}

    def test_missing_password(self, client):
        response = client.post("/api/auth/login", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Password required"}

    def test_login_check_logout(self, client):
        assert client.get("/api/auth/check").json()["isAuthenticated"] is False

        client.post("/api/auth/login", json={"password": PASSWORD})
        check = client.get("/api/auth/check").json()
        assert check["isAuthenticated"] is True
        assert isinstance(check["loginTime"], int)
        assert client.get("/api/tours").status_code == 200

        client.post("/api/auth/logout")
        assert client.get("/api/tours").status_code == 401


# ---------------------------------------------------------------------------
# Tours, stops and visitor lookups
# ---------------------------------------------------------------------------


class TestTourFlow:
    def test_templates_seeded(self, admin):
        names = [t["name"] for t in admin.get("/api/templates").json()]
        assert len(names) == 7
        assert "QR Code" in names

    def test_create_tour_defaults(self, admin):
        tour = _create_tour(admin)
        assert tour["slug"] == "ancient-egypt"
        assert tour["status"] == "draft"
        assert tour["templateId"]
        assert tour["stops"] == []

    def test_update_and_bad_status(self, admin):
        tour = _create_tour(admin)
        updated = admin.put(f"/api/tours/{tour['id']}", json={"status": "published", "duration": 50})
        assert updated.status_code == 200
        assert updated.json()["status"] == "published"

        bad = admin.put(f"/api/tours/{tour['id']}", json={"status": "vanished"})
        assert bad.status_code == 400
        assert bad.json()["error"] == "Invalid request"

    def test_missing_tour(self, admin):
        response = admin.get("/api/tours/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Tour not found"}

    def test_stop_requires_tour_id(self, admin):
        response = admin.post("/api/stops", json={"title": {"en": "Orphan"}})
        assert response.status_code == 400
        assert response.json() == {"error": "tourId is required"}

    def test_stops_and_visitor_lookup(self, admin):
        tour = _create_tour(admin)
        first = _create_stop(admin, tour["id"], "Rosetta Stone")
        second = _create_stop(admin, tour["id"], "Sarcophagus")

        positioning = first["primaryPositioning"]
        assert positioning["method"] == "qr_code"
        assert positioning["url"].startswith(f"{BASE_URL}/visitor/tour/ancient-egypt/stop/rosetta-stone?t=")
        assert "contentBlocks" in first

        listed = admin.get(f"/api/stops/{tour['id']}").json()
        assert [s["id"] for s in listed] == [first["id"], second["id"]]

        reordered = admin.put(
            f"/api/stops/reorder/{tour['id']}", json={"stopIds": [second["id"], first["id"]]}
        ).json()
        assert [s["id"] for s in reordered] == [second["id"], first["id"]]

        admin.post("/api/auth/logout")

        resolved = admin.get(f"/api/visitor/s/{positioning['shortCode'].lower()}")
        assert resolved.status_code == 200
        assert resolved.json() == {
            "redirectUrl": "/visitor/tour/ancient-egypt/stop/rosetta-stone",
            "tourSlug": "ancient-egypt",
            "stopSlug": "rosetta-stone",
        }

        page = admin.get("/api/visitor/tour/ancient-egypt/stop/sarcophagus").json()
        assert page["stop"]["id"] == second["id"]
        assert page["tour"]["stops"] == []
        assert len(page["allStops"]) == 2

    def test_regenerate_qr(self, admin):
        tour = _create_tour(admin)
        stop = _create_stop(admin, tour["id"], "Rosetta Stone")
        response = admin.post(f"/api/stops/{stop['id']}/qr/regenerate", json={"regenerateShortCode": False})
        assert response.status_code == 200
        assert response.json()["primaryPositioning"]["shortCode"] == stop["primaryPositioning"]["shortCode"]

    def test_duplicate_and_delete(self, admin):
        tour = _create_tour(admin)
        stop = _create_stop(admin, tour["id"], "Rosetta Stone")

        copy = admin.post(f"/api/tours/{tour['id']}/duplicate")
        assert copy.status_code == 201
        assert copy.json()["title"] == {"en": "Ancient Egypt (Copy)"}
        assert len(copy.json()["stops"]) == 1

        assert admin.delete(f"/api/tours/{tour['id']}").status_code == 204
        assert admin.get(f"/api/stops/detail/{stop['id']}").status_code == 404

    def test_feeds(self, admin):
        tour = _create_tour(admin)
        _create_stop(admin, tour["id"], "Rosetta Stone")
        feed = admin.get("/api/feeds/tours").json()
        assert feed["version"] == "1.0"
        assert feed["total_tours"] == 1
        assert feed["tours"][0]["stop_count"] == 1

        stops = admin.get(f"/api/feeds/tours/{tour['id']}/stops").json()
        assert stops["total_stops"] == 1


# ---------------------------------------------------------------------------
# Media and collections
# ---------------------------------------------------------------------------


class TestMedia:
    def test_upload_serve_and_delete(self, admin):
        data = _png_bytes()
        response = admin.post(
            "/api/media",
            files={"file": ("vase.png", data, "image/png")},
            data={"alt": "Red vase", "tags": json.dumps(["greek", "ceramic"])},
        )
        assert response.status_code == 201
        media = response.json()
        assert media["alt"] == "Red vase"
        assert media["tags"] == ["greek", "ceramic"]
        assert (media["width"], media["height"]) == (64, 48)

        served = admin.get(media["url"])
        assert served.status_code == 200
        assert served.content == data

        assert admin.get(f"/api/media/{media['id']}/usage").json() == {"tours": [], "stops": []}
        assert admin.delete(f"/api/media/{media['id']}").status_code == 204
        assert admin.get(f"/api/media/{media['id']}").status_code == 404

    def test_upload_only_stores_file(self, admin):
        data = _png_bytes()
        response = admin.post("/api/media/upload", files={"file": ("plan.png", data, "image/png")})
        assert response.status_code == 201
        stored = response.json()
        assert stored["url"].startswith("/uploads/images/")
        assert admin.get(stored["url"]).content == data
        assert admin.get("/api/media").json() == []

    def test_disallowed_type(self, admin):
        response = admin.post("/api/media", files={"file": ("page.html", b"<html>", "text/html")})
        assert response.status_code == 400

    def test_collections(self, admin):
        created = admin.post("/api/collections", json={"name": "Bronzes", "type": "gallery"})
        assert created.status_code == 201
        collection_id = created.json()["id"]

        with_item = admin.post(
            f"/api/collections/{collection_id}/items", json={"type": "image", "url": "/uploads/images/x.png"}
        )
        assert with_item.status_code == 201
        assert len(with_item.json()["items"]) == 1

        assert [c["id"] for c in admin.get("/api/collections", params={"type": "gallery"}).json()] == [collection_id]
        assert admin.delete(f"/api/collections/{collection_id}").status_code == 204


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    def test_read_and_patch(self, admin):
        settings = admin.get("/api/settings").json()
        assert "general" in settings

        patched = admin.patch("/api/settings/maps", json={"defaultMapProvider": "google"})
        assert patched.status_code == 200
        body = patched.json()
        assert body["success"] is True
        assert body["settings"]["maps"]["defaultMapProvider"] == "google"
        assert "general" in body["settings"]

    def test_null_section_rejected(self, admin):
        response = admin.put("/api/settings", json={"maps": None})
        assert response.status_code == 400
        assert response.json() == {"error": "Section maps must be an object"}
        assert admin.patch("/api/settings/maps", json={"googleMapsEnabled": True}).status_code == 200

    def test_unknown_section(self, admin):
        response = admin.patch("/api/settings/weather", json={"x": 1})
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Concierge and chat
# ---------------------------------------------------------------------------


class TestConcierge:
    def test_knowledge_and_preview(self, admin, mock_llm):
        config = admin.get("/api/concierge/config").json()
        source = admin.post("/api/concierge/knowledge", json={
            "configId": config["id"],
            "sourceType": "custom_text",
            "title": "Hours",
            "content": "Open 10-18.",
        })
        assert source.status_code == 201

        preview = admin.post("/api/concierge/preview", json={"message": "When do you open?"})
        assert preview.status_code == 200
        assert preview.json() == {"response": "The gallery opens at nine.", "sources": ["Hours"]}
        assert "Open 10-18." in mock_llm.complete.await_args.args[0]

        deleted = admin.delete(f"/api/concierge/knowledge/{source.json()['id']}")
        assert deleted.json() == {"success": True}

    def test_quick_actions_translate(self, admin):
        config = admin.get("/api/concierge/config").json()
        added = admin.post("/api/concierge/quick-actions", json={
            "configId": config["id"], "question": {"en": "Where is the cafe?"}, "category": "facilities",
        })
        assert added.status_code == 201

        result = admin.post("/api/concierge/quick-actions/translate-all", json={"configId": config["id"]})
        assert result.json() == {"success": True, "translatedCount": 1, "languages": ["es", "fr", "de"]}

        (action,) = admin.get("/api/concierge/quick-actions", params={"configId": config["id"]}).json()
        assert action["question"]["fr"] == "fr:Where is the cafe?"

    def test_public_chat(self, client, mock_llm):
        response = client.post("/api/chat", json={"message": "Are you open Monday?", "language": "de"})
        assert response.status_code == 200
        assert response.json() == {
            "response": "de:The cafe is on the ground floor.",
            "sources": ["hours.txt"],
            "language": "de",
        }
        assert "Open Tuesday to Sunday" in mock_llm.chat.await_args.args[0][0][1]

    def test_chat_status(self, client):
        status = client.get("/api/chat/status").json()
        assert status["knowledgeFiles"] == ["hours.txt"]
        assert status["available"] is True

    def test_chat_requires_message(self, client):
        response = client.post("/api/chat", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Message is required"}


# ---------------------------------------------------------------------------
# Translation (mock LibreTranslate)
# ---------------------------------------------------------------------------


def test_translate_with_mock_engine(admin):
    response = admin.post("/api/translate", json={"text": "Hello", "sourceLang": "en", "targetLang": "fr"})
    assert response.status_code == 200
    assert response.json()["translatedText"] == "[FR] Hello"
