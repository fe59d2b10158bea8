# tests/test_avatars.py

import io

import pytest
from PIL import Image

from app.avatars import normalize_avatar
from app.errors import ValidationError

from .conftest import auth_header


def _image_bytes(fmt: str = "PNG", size=(400, 300), mode: str = "RGB") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color="red").save(buf, format=fmt)
    return buf.getvalue()


def _upload(client, headers, filename, data, content_type="image/png"):
    return client.post("/users/me/avatar", files={"avatarUpload": (filename, data, content_type)}, headers=headers)


@pytest.mark.parametrize(
    "filename,fmt,content_type",
    [("me.png", "PNG", "image/png"), ("me.jpg", "JPEG", "image/jpeg"), ("ME.JPEG", "JPEG", "image/jpeg")],
)
def test_upload_and_fetch_avatar(client, register, filename, fmt, content_type):
    token, user = register()

    response = _upload(client, auth_header(token), filename, _image_bytes(fmt), content_type)
    assert response.status_code == 200

    fetched = client.get(f"/users/{user['id']}/avatar")
    assert fetched.status_code == 200
    assert fetched.headers["content-type"] == "image/png"
    with Image.open(io.BytesIO(fetched.content)) as image:
        assert image.format == "PNG"
        assert image.size == (250, 250)


def test_avatar_is_not_in_profile(client, register):
    token, _ = register()
    _upload(client, auth_header(token), "me.png", _image_bytes())

    assert "avatar" not in client.get("/users/me", headers=auth_header(token)).json()


def test_upload_rejects_other_extensions(client, register):
    token, _ = register()

    response = _upload(client, auth_header(token), "me.gif", _image_bytes("GIF", mode="P"), "image/gif")

    assert response.status_code == 400
    assert "jpg, jpeg, or png" in response.json()["detail"]


def test_upload_rejects_large_files(client, register):
    token, _ = register()

    response = _upload(client, auth_header(token), "huge.png", b"\x00" * 1_000_001)

    assert response.status_code == 400


def test_upload_rejects_undecodable_image(client, register):
    token, _ = register()

    response = _upload(client, auth_header(token), "fake.png", b"definitely not a png")

    assert response.status_code == 400


def test_upload_requires_authentication(client):
    assert _upload(client, {}, "me.png", _image_bytes()).status_code == 401


def test_delete_avatar_is_idempotent(client, register):
    token, user = register()
    _upload(client, auth_header(token), "me.png", _image_bytes())

    first = client.delete("/users/me/avatar", headers=auth_header(token))
    second = client.delete("/users/me/avatar", headers=auth_header(token))

    assert first.status_code == 200
    assert second.status_code == 200
    assert client.get(f"/users/{user['id']}/avatar").status_code == 404


def test_missing_avatar_is_not_found(client, register):
    _, user = register()

    assert client.get(f"/users/{user['id']}/avatar").status_code == 404
    assert client.get("/users/no-such-user/avatar").status_code == 404


def test_normalize_avatar_handles_palette_images():
    data = normalize_avatar(_image_bytes("PNG", size=(10, 40), mode="P"), size=64)

    with Image.open(io.BytesIO(data)) as image:
        assert image.size == (64, 64)


def test_normalize_avatar_rejects_garbage():
    with pytest.raises(ValidationError):
        normalize_avatar(b"\x89PNG but not really")


def test_upload_rejects_huge_canvas_in_small_file(client, register):
    token, _ = register()
    data = _image_bytes("PNG", size=(6000, 5000), mode="1")
    assert len(data) < 1_000_000

    response = _upload(client, auth_header(token), "bomb.png", data)

    assert response.status_code == 400
    assert client.get("/users/me", headers=auth_header(token)).status_code == 200


@pytest.mark.parametrize("pillow_limit", [1_000, 100_000])
def test_normalize_avatar_turns_pillow_bomb_checks_into_validation_errors(monkeypatch, pillow_limit):
    # 400x300 is past twice the first limit (error) and just over the second (warning)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", pillow_limit)

    with pytest.raises(ValidationError):
        normalize_avatar(_image_bytes("PNG"), max_pixels=10**9)


def test_normalize_avatar_enforces_pixel_cap():
    with pytest.raises(ValidationError):
        normalize_avatar(_image_bytes("PNG", size=(20, 20)), max_pixels=399)


def test_upload_reads_the_avatar_upload_field(client, register):
    token, _ = register()
    wrong_field = {"avatar": ("me.png", _image_bytes(), "image/png")}

    response = client.post("/users/me/avatar", files=wrong_field, headers=auth_header(token))

    assert response.status_code == 400
