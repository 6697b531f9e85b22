"""Tests for the HTTP layer."""
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from bagconvert.api import routes
from bagconvert.api.routes import _parse_formats
from bagconvert.conversion.service import ConversionService
from bagconvert.conversion.video import VideoConverter
from bagconvert.main import app
from conftest import StubRunner


@pytest.fixture
def runner():
    return StubRunner(payload=b"fake-video")


@pytest.fixture
def client(monkeypatch, scratch, runner):
    service = ConversionService(video_converter=VideoConverter(scratch=scratch, runner=runner))
    monkeypatch.setattr(routes, "get_conversion_service", lambda: service)
    with TestClient(app) as c:
        yield c


def post(client, data, filename="pixel.png", content_type="image/png", formats='["webp","png"]', headers=None):
    return client.post(
        "/api/convert",
        files={"file": (filename, data, content_type)},
        data={"formats": formats},
        headers=headers or {},
    )


class TestInfoRoutes:
    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "ok"}

    def test_formats(self, client):
        assert client.get("/api/formats").json() == {
            "image": ["webp", "avif", "png", "jpg"],
            "video": ["mp4", "webm", "gif"],
        }

    def test_limits(self, client):
        body = client.get("/api/limits").json()
        assert body["max_image_size_bytes"] == body["max_image_size_mb"] * 1024 * 1024


class TestConvert:
    def test_image_free(self, client, png_bytes):
        resp = post(client, png_bytes)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["tier"] == "free"
        assert [r["filename"] for r in body["results"]] == ["pixel.webp", "pixel.png"]
        first = body["results"][0]
        assert first["data"].startswith("data:image/webp;base64,")
        assert first["size"] > 0
        assert first["codeSnippet"]["markdown"].startswith("![Image](")

    def test_comma_separated_formats(self, client, png_bytes):
        resp = post(client, png_bytes, formats="png, jpg")
        assert [r["format"] for r in resp.json()["results"]] == ["png", "jpg"]

    def test_premium_header(self, client, png_bytes):
        resp = post(client, png_bytes, headers={"X-User-Tier": "lifetime"})
        assert resp.json()["tier"] == "premium"

    def test_video_upload(self, client, runner):
        resp = post(client, b"video-bytes", filename="clip.mov", content_type="video/quicktime", formats='["gif"]')
        assert resp.status_code == 200
        assert resp.json()["results"][0]["filename"] == "clip.gif"
        assert len(runner.commands) == 1

    def test_kind_from_extension(self, client, png_bytes):
        resp = post(client, png_bytes, content_type="application/octet-stream")
        assert resp.status_code == 200

    def test_unsupported_file_type(self, client):
        resp = post(client, b"hello", filename="notes.txt", content_type="text/plain")
        assert resp.status_code == 400

    @pytest.mark.parametrize("formats", ["", "[]", " , "])
    def test_no_formats(self, client, png_bytes, formats):
        assert post(client, png_bytes, formats=formats).status_code == 400

    @pytest.mark.parametrize("formats", ["[not json", '{"a": 1}', "[1, 2]"])
    def test_malformed_formats(self, client, png_bytes, formats):
        assert post(client, png_bytes, formats=formats).status_code == 400

    def test_empty_file(self, client):
        assert post(client, b"").status_code == 400

    def test_too_large(self, client, png_bytes, monkeypatch):
        monkeypatch.setattr(routes, "MAX_IMAGE_SIZE_BYTES", 10)
        assert post(client, png_bytes).status_code == 413

    def test_every_format_failed(self, client):
        resp = post(client, b"corrupt", formats='["webp"]')
        assert resp.status_code == 422


class TestParseFormats:
    def test_json_array(self):
        assert _parse_formats('["WebP", " png "]') == ["webp", "png"]

    def test_comma_separated(self):
        assert _parse_formats("gif, mp4,,") == ["gif", "mp4"]

    @pytest.mark.parametrize("raw", ['{"a": 1}', '{"formats": ["png"]}', "{broken"])
    def test_json_object_is_rejected(self, raw):
        with pytest.raises(HTTPException) as exc:
            _parse_formats(raw)
        assert exc.value.status_code == 400
