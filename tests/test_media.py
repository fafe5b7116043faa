# =============================================================================
# tests/test_media.py - Cloudinary client helpers
# =============================================================================

import asyncio
import hashlib
import io

import httpx
import pytest
from starlette.datastructures import UploadFile

from utils.cloudinary import MediaClient, sign_params, stage_upload


def test_signature_sorts_params_and_skips_empty():
    signature = sign_params({"timestamp": 1700000000, "folder": "avatars", "eager": None}, "s3cr3t")

    expected = hashlib.sha1(b"folder=avatars&timestamp=1700000000s3cr3t").hexdigest()
    assert signature == expected


def test_stage_upload_writes_file(tmp_path):
    upload = UploadFile(file=io.BytesIO(b"image-bytes"), filename="Me.PNG")

    path = stage_upload(upload, temp_dir=str(tmp_path))

    assert path.parent == tmp_path
    assert path.suffix == ".png"
    assert path.read_bytes() == b"image-bytes"


def test_upload_url_uses_cloud_name():
    client = MediaClient()

    assert client.upload_url == "https://api.cloudinary.com/v1_1/test-cloud/image/upload"


def test_failed_upload_removes_staged_file(tmp_path, monkeypatch):
    staged = tmp_path / "avatar.png"
    staged.write_bytes(b"x")

    async def _boom(self, url, **kwargs):
        raise httpx.ConnectError("offline")

    monkeypatch.setattr(httpx.AsyncClient, "post", _boom)

    with pytest.raises(httpx.ConnectError):
        asyncio.run(MediaClient().upload_image(staged))
    assert not staged.exists()


def test_successful_upload_returns_payload(tmp_path, monkeypatch):
    staged = tmp_path / "avatar.png"
    staged.write_bytes(b"x")
    seen = {}

    async def _ok(self, url, data=None, files=None, **kwargs):
        seen["url"] = url
        seen["data"] = data
        return httpx.Response(200, json={"url": "http://res.cloudinary.com/x.png"}, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx.AsyncClient, "post", _ok)

    result = asyncio.run(MediaClient().upload_image(staged, folder="avatars"))

    assert result["url"] == "http://res.cloudinary.com/x.png"
    assert seen["data"]["api_key"] == "test-key"
    assert seen["data"]["folder"] == "avatars"
    assert "signature" in seen["data"]
    assert not staged.exists()
