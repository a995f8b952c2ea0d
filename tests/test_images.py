import asyncio

import pytest
from starlette.requests import Request

from library_api.app.core.config import settings
from library_api.app.core.errors import ValidationFailed
from library_api.app.services.images import read_upload, validate_image


def _request(chunks, headers=()):
    """A request whose body arrives in ``chunks`` without a Content-Length."""
    messages = [{"type": "http.request", "body": c, "more_body": True} for c in chunks]
    messages.append({"type": "http.request", "body": b"", "more_body": False})
    received = []

    async def receive():
        message = messages.pop(0)
        received.append(message)
        return message

    scope = {"type": "http", "method": "PUT", "path": "/", "headers": list(headers), "query_string": b""}
    return Request(scope, receive), received


def test_read_upload_stops_at_the_limit(monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 1024)
    request, received = _request([b"x" * 600] * 10)
    with pytest.raises(ValidationFailed) as exc:
        asyncio.run(read_upload(request))
    assert "profile_image" in exc.value.errors
    assert len(received) == 2


def test_read_upload_refuses_declared_oversize_without_reading(monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 1024)
    request, received = _request([b"x" * 2048], headers=[(b"content-length", b"2048")])
    with pytest.raises(ValidationFailed):
        asyncio.run(read_upload(request))
    assert received == []


def test_read_upload_returns_the_whole_body(monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 1024)
    request, _ = _request([b"GIF8", b"9a"])
    assert asyncio.run(read_upload(request)) == b"GIF89a"


@pytest.mark.parametrize(
    "content_type,extension",
    [("image/png", ".png"), ("image/jpeg; charset=binary", ".jpg"), ("IMAGE/WEBP", ".webp")],
)
def test_validate_image_picks_extension(content_type, extension):
    assert validate_image(b"data", content_type) == extension


def test_validate_image_rejects_empty_and_non_images():
    with pytest.raises(ValidationFailed):
        validate_image(b"", "image/png")
    with pytest.raises(ValidationFailed):
        validate_image(b"data", None)
