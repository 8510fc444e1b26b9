"""Tests for the HTTP routes."""

import base64
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from main import app, get_catalog, get_facade, get_registry
from services import FallbackOrchestrator, PixelTransformEngine, ProviderRegistry, RequestFacade, StyleCatalog

from .conftest import FakeProvider


@pytest.fixture
def providers():
    return [
        FakeProvider("offline", priority=1, configured=False),
        FakeProvider("fake", priority=2),
    ]


@pytest.fixture
def facade(providers):
    orchestrator = FallbackOrchestrator(
        registry=ProviderRegistry(providers),
        catalog=StyleCatalog(),
        engine=PixelTransformEngine(canvas_size=64),
    )
    return RequestFacade(orchestrator, max_upload_bytes=1024 * 1024)


@pytest.fixture
def client(providers, facade):
    app.dependency_overrides[get_registry] = lambda: ProviderRegistry(providers)
    app.dependency_overrides[get_catalog] = lambda: StyleCatalog()
    app.dependency_overrides[get_facade] = lambda: facade
    yield TestClient(app)
    app.dependency_overrides.clear()


def data_uri(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode()}"


class TestCatalogRoutes:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_styles(self, client):
        styles = client.get("/api/styles").json()
        assert [s["label"] for s in styles] == ["Neon Glow", "Dark Gold", "Cyberpunk Blue", "Cosmic Purple"]
        default = [s for s in styles if s["isDefault"]]
        assert len(default) == 1
        assert default[0]["id"] == "DARK_GOLD"
        assert default[0]["accentColor"] == "#ffd700"

    def test_providers(self, client):
        body = client.get("/api/providers").json()
        assert [p["id"] for p in body["providers"]] == ["offline", "fake"]
        assert body["providers"][0]["configured"] is False
        assert body["firstAvailable"] == "fake"


class TestGenerateAvatar:
    def test_success(self, client, solid_png):
        r = client.post("/api/generate-avatar", json={"userImage": data_uri(solid_png), "style": "Neon Glow"})

        assert r.status_code == 200
        body = r.json()
        assert body["success"] is True
        assert body["producedBy"] == "provider:fake"
        assert body["mimeType"] == "image/png"
        assert base64.b64decode(body["image"]).startswith(b"\x89PNG")

    def test_local_fallback(self, client, providers, solid_png):
        providers[1].configured = False
        r = client.post("/api/generate-avatar", json={"userImage": data_uri(solid_png)})
        assert r.status_code == 200
        assert r.json()["producedBy"] == "local-fallback"

    def test_missing_image(self, client):
        r = client.post("/api/generate-avatar", json={"style": "Dark Gold"})
        assert r.status_code == 400
        assert r.json()["success"] is False
        assert r.json()["error"] == "Could not read your image"

    def test_undecodable_image(self, client, providers):
        r = client.post("/api/generate-avatar", json={"userImage": data_uri(b"not really a png")})
        assert r.status_code == 400
        assert providers[1].calls == []

    def test_unexpected_failure(self, client, facade, solid_png):
        facade.orchestrator.generate = AsyncMock(side_effect=RuntimeError("boom"))
        r = client.post("/api/generate-avatar", json={"userImage": data_uri(solid_png)})
        assert r.status_code == 500
        assert r.json()["error"] == "Failed to generate avatar"
        assert r.json()["details"] == "boom"


class TestUpload:
    def test_upload(self, client, jpeg_bytes):
        r = client.post(
            "/api/generate-avatar/upload",
            files={"file": ("me.jpg", jpeg_bytes, "image/jpeg")},
            data={"style": "Cosmic Purple", "prompt": "smiling"},
        )
        assert r.status_code == 200
        assert "smiling" in r.json()["prompt"]

    def test_octet_stream_uses_extension(self, client, solid_png):
        r = client.post(
            "/api/generate-avatar/upload",
            files={"file": ("me.png", solid_png, "application/octet-stream")},
        )
        assert r.status_code == 200

    def test_unsupported_extension(self, client, solid_png):
        r = client.post("/api/generate-avatar/upload", files={"file": ("notes.txt", solid_png, "text/plain")})
        assert r.status_code == 400
        assert "Unsupported format" in r.json()["details"]

    def test_too_large(self, client):
        r = client.post(
            "/api/generate-avatar/upload",
            files={"file": ("big.png", b"\x00" * (1024 * 1024 + 1), "image/png")},
        )
        assert r.status_code == 400
