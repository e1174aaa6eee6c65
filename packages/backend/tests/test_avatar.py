"""Avatar tests — upload pipeline and the avatar endpoints."""

import io
import uuid

import pytest
from PIL import Image

from taskmanager.config import settings
from taskmanager.errors import ValidationError
from taskmanager.services.avatar import normalize_avatar, validate_upload


def _image_bytes(fmt: str = "PNG", size=(400, 300)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, "red").save(buf, format=fmt)
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════
# Pipeline
# ═══════════════════════════════════════════════════════════


def test_normalize_resizes_to_png():
    out = normalize_avatar(_image_bytes("JPEG"), size=250)
    with Image.open(io.BytesIO(out)) as img:
        assert img.format == "PNG"
        assert img.size == (250, 250)


def test_normalize_rejects_non_images():
    with pytest.raises(ValidationError):
        normalize_avatar(b"definitely not an image")


@pytest.mark.parametrize("name", ["me.jpg", "me.JPEG", "me.png"])
def test_validate_upload_accepts_image_extensions(name):
    validate_upload(name, 10, max_bytes=100)


@pytest.mark.parametrize("name", ["me.gif", "me.png.exe", "", None])
def test_validate_upload_rejects_other_extensions(name):
    with pytest.raises(ValidationError):
        validate_upload(name, 10, max_bytes=100)


def test_validate_upload_rejects_large_files():
    with pytest.raises(ValidationError):
        validate_upload("me.png", 101, max_bytes=100)


# ═══════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_upload_and_fetch_avatar(client, alice):
    r = await client.post(
        "/api/v1/users/me/avatar",
        headers=alice["headers"],
        files={"avatar": ("me.jpg", _image_bytes("JPEG"), "image/jpeg")},
    )
    assert r.status_code == 200

    r = await client.get(f"/api/v1/users/{alice['user']['id']}/avatar")
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/png"
    with Image.open(io.BytesIO(r.content)) as img:
        assert img.size == (settings.avatar_size, settings.avatar_size)


@pytest.mark.asyncio
async def test_profile_does_not_inline_avatar(client, alice):
    await client.post(
        "/api/v1/users/me/avatar",
        headers=alice["headers"],
        files={"avatar": ("me.png", _image_bytes(), "image/png")},
    )
    r = await client.get("/api/v1/users/me", headers=alice["headers"])
    assert "avatar" not in r.json()


@pytest.mark.asyncio
async def test_upload_rejects_wrong_extension(client, alice):
    r = await client.post(
        "/api/v1/users/me/avatar",
        headers=alice["headers"],
        files={"avatar": ("me.gif", _image_bytes("GIF"), "image/gif")},
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_upload_rejects_oversized_file(client, alice, monkeypatch):
    monkeypatch.setattr(settings, "avatar_max_bytes", 100)
    r = await client.post(
        "/api/v1/users/me/avatar",
        headers=alice["headers"],
        files={"avatar": ("me.png", _image_bytes(), "image/png")},
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_upload_requires_auth(client):
    r = await client.post(
        "/api/v1/users/me/avatar",
        files={"avatar": ("me.png", _image_bytes(), "image/png")},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_delete_avatar(client, alice):
    await client.post(
        "/api/v1/users/me/avatar",
        headers=alice["headers"],
        files={"avatar": ("me.png", _image_bytes(), "image/png")},
    )
    r = await client.delete("/api/v1/users/me/avatar", headers=alice["headers"])
    assert r.status_code == 200

    r = await client.get(f"/api/v1/users/{alice['user']['id']}/avatar")
    assert r.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", [str(uuid.uuid4()), "not-a-uuid"])
async def test_missing_avatar_is_not_found(client, user_id):
    r = await client.get(f"/api/v1/users/{user_id}/avatar")
    assert r.status_code == 404
