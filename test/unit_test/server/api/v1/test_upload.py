"""Tests for the image upload endpoint."""

import io
import re

import pytest
from fastapi import HTTPException, UploadFile
from PIL import Image
from starlette.datastructures import Headers

from realty_portal.integrations import media
from realty_portal.server.api.v1 import upload as upload_api
from realty_portal.server.core.config import settings


def _png(size=(3000, 2000)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(30, 90, 160)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def local_storage(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path))
    monkeypatch.setattr(media, "is_cloudinary_configured", lambda: False)
    return tmp_path


class TestUpload:
    async def test_stores_resized_jpeg(self, client, agent, auth_headers, local_storage):
        files = {"file": ("photo.png", _png(), "image/png")}

        response = await client.post(
            "/api/upload", files=files, data={"title": "Sunny Loft in BGC!"}, headers=auth_headers(agent)
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["storage"] == "local"
        assert body["original_size"] == {"width": 3000, "height": 2000}
        assert body["processed_size"] == {"width": 2000, "height": 1333}
        assert re.fullmatch(r"/uploads/sunny-loft-in-bgc/listing-\d+-[a-z0-9]{13}\.jpg", body["url"])
        assert len(list((local_storage / "sunny-loft-in-bgc").iterdir())) == 1

    async def test_default_folder(self, client, agent, auth_headers, local_storage):
        files = {"file": ("photo.png", _png((100, 100)), "image/png")}

        response = await client.post("/api/upload", files=files, headers=auth_headers(agent))

        assert response.json()["url"].startswith("/uploads/listings/")

    async def test_missing_file(self, client, agent, auth_headers, local_storage):
        response = await client.post("/api/upload", data={"folder": "x"}, headers=auth_headers(agent))

        assert response.status_code == 400
        assert response.json()["detail"] == "No file provided"

    async def test_wrong_content_type(self, client, agent, auth_headers, local_storage):
        files = {"file": ("notes.txt", b"hello", "text/plain")}

        response = await client.post("/api/upload", files=files, headers=auth_headers(agent))

        assert response.status_code == 400
        assert response.json()["detail"] == "File must be an image"

    async def test_undecodable_image(self, client, agent, auth_headers, local_storage):
        files = {"file": ("broken.png", b"not really a png", "image/png")}

        response = await client.post("/api/upload", files=files, headers=auth_headers(agent))

        assert response.status_code == 400
        assert response.json()["detail"] == "File must be an image"

    async def test_too_large(self, client, agent, auth_headers, local_storage, monkeypatch):
        monkeypatch.setattr(settings, "upload_max_bytes", 1024)
        files = {"file": ("photo.png", _png(), "image/png")}

        response = await client.post("/api/upload", files=files, headers=auth_headers(agent))

        assert response.status_code == 400
        assert response.json()["detail"].startswith("File size exceeds")

    async def test_storage_failure(self, client, agent, auth_headers, monkeypatch):
        def _fail(data, folder):
            raise media.MediaUploadError("cloud down")

        monkeypatch.setattr(media, "is_cloudinary_configured", lambda: True)
        monkeypatch.setattr(media, "_upload_to_cloudinary", _fail)
        files = {"file": ("photo.png", _png((100, 100)), "image/png")}

        response = await client.post("/api/upload", files=files, headers=auth_headers(agent))

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to upload image"

    async def test_requires_session(self, client):
        files = {"file": ("photo.png", b"x", "image/png")}

        assert (await client.post("/api/upload", files=files)).status_code == 401


async def test_oversized_stream_is_read_only_past_the_limit(monkeypatch):
    monkeypatch.setattr(settings, "upload_max_bytes", 1024)
    stream = io.BytesIO(b"\xff" * 10_000)
    upload = UploadFile(stream, filename="huge.jpg", headers=Headers({"content-type": "image/jpeg"}))

    with pytest.raises(HTTPException) as exc_info:
        await upload_api.upload_image(file=upload, folder=None, title=None, claims=None)

    assert exc_info.value.status_code == 400
    assert stream.tell() == 1025


async def test_declared_size_over_limit_is_rejected_before_reading(monkeypatch):
    monkeypatch.setattr(settings, "upload_max_bytes", 1024)
    stream = io.BytesIO(b"\xff" * 2048)
    upload = UploadFile(stream, size=2048, filename="huge.jpg", headers=Headers({"content-type": "image/jpeg"}))

    with pytest.raises(HTTPException):
        await upload_api.upload_image(file=upload, folder=None, title=None, claims=None)

    assert stream.tell() == 0
