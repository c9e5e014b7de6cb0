"""
HTTP Service Tests
==================

Encode, decode and inspect endpoints of the FastAPI application.
"""

import pytest
from fastapi.testclient import TestClient

from pixelframe.codec import encode_frame, encode_png, rasterize
from pixelframe.config import settings
from pixelframe.main import app


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


class TestServiceInfo:
    """Tests for informational endpoints."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "PixelFrame"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCodecEndpoints:
    """Tests for encode/decode/inspect."""

    def test_encode_decode(self, client, repetitive_payload):
        encoded = client.post("/encode?compress=true", content=repetitive_payload)

        assert encoded.status_code == 200
        assert encoded.headers["content-type"] == "image/png"
        assert encoded.content.startswith(b"\x89PNG")

        decoded = client.post("/decode", content=encoded.content)

        assert decoded.status_code == 200
        assert decoded.content == repetitive_payload

    def test_encode_dimensions_headers(self, client, small_payload):
        response = client.post("/encode?compress=false", content=small_payload)

        assert response.headers["x-image-width"] == "4"
        assert response.headers["x-image-height"] == "4"

    def test_inspect(self, client, small_payload):
        encoded = client.post("/encode?compress=false", content=small_payload)
        response = client.post("/inspect", content=encoded.content)

        assert response.status_code == 200
        info = response.json()
        assert info["magic"] == "0x54414C55"
        assert info["version"] == 1
        assert info["original_size"] == 10
        assert info["stored_size"] == 10
        assert info["compressed"] is False
        assert (info["width"], info["height"]) == (4, 4)

    def test_empty_payload(self, client):
        response = client.post("/encode", content=b"")

        assert response.status_code == 400
        assert response.json()["error"] == "empty_payload"

    def test_not_a_png(self, client):
        response = client.post("/decode", content=b"\xff\xd8\xff\xe0 jpeg-ish")

        assert response.status_code == 400
        assert response.json()["error"] == "unsupported_image_format"

    def test_checksum_mismatch(self, client, small_payload):
        framed = bytearray(encode_frame(small_payload, use_compression=False))
        framed[-1] ^= 0x80
        png = encode_png(rasterize(bytes(framed)))

        response = client.post("/decode", content=png)

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "checksum_mismatch"
        assert body["field"] == "integrity_digest"

    def test_body_limit(self, client, monkeypatch):
        monkeypatch.setattr(settings.server, "max_body_bytes", 16)

        response = client.post("/encode", content=b"x" * 17)

        assert response.status_code == 413
        assert response.json()["error"] == "request_too_large"
