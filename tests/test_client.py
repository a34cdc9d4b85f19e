"""Tests for the compress-and-upload client."""
import io
import httpx
import pytest
from PIL import Image as PILImage

from supportdesk.client import SupportDeskClient, UploadError
from supportdesk.services.image_service import ImageDecodeError


def _wsgi_client(app, **kwargs):
    return SupportDeskClient("http://testserver", transport=httpx.WSGITransport(app=app), **kwargs)


def test_compress_and_upload_round_trip(app, make_image, tmp_path):
    path = tmp_path / "screenshot.png"
    path.write_bytes(make_image(3000, 2000, fmt="PNG"))

    with _wsgi_client(app) as client:
        result = client.compress_and_upload(str(path))
        stored = client.get_image(result["imageId"])
        meta = client.get_image_metadata(result["imageId"])

    assert result["originalSize"] == path.stat().st_size
    assert result["compressedSize"] == len(stored)
    with PILImage.open(io.BytesIO(stored)) as img:
        assert img.size == (1620, 1080)
        assert img.format == "PNG"
    assert meta["originalName"] == "screenshot.png"
    assert meta["size"] == path.stat().st_size
    assert meta["compressedSize"] == len(stored)


def test_sends_user_header_and_sizes(make_image):
    captured = {}

    def handler(request):
        captured["headers"] = request.headers
        captured["body"] = request.read()
        return httpx.Response(201, json={"imageId": 42, "previewUrl": "http://x/image/42"})

    client = SupportDeskClient("http://x", user_id=7, transport=httpx.MockTransport(handler))
    result = client.compress_and_upload(make_image(100, 100), filename="a.jpg")

    assert result["imageId"] == 42
    assert captured["headers"]["X-User-ID"] == "7"
    assert b'name="originalSize"' in captured["body"]
    assert b'name="compressedSize"' in captured["body"]
    assert b'filename="a.jpg"' in captured["body"]


def test_server_rejection_raises_upload_error(make_image):
    def handler(request):
        return httpx.Response(400, json={"success": False, "message": "File too large. Maximum size is 10MB."})

    client = SupportDeskClient("http://x", transport=httpx.MockTransport(handler))
    with pytest.raises(UploadError) as exc:
        client.compress_and_upload(make_image(10, 10), filename="a.jpg")
    assert exc.value.status_code == 400
    assert exc.value.message.startswith("File too large")


def test_undecodable_file_never_reaches_server():
    def handler(request):
        pytest.fail("request should not be sent")

    client = SupportDeskClient("http://x", transport=httpx.MockTransport(handler))
    with pytest.raises(ImageDecodeError):
        client.compress_and_upload(b"not an image", filename="a.jpg")


def test_raw_bytes_need_a_filename(make_image):
    client = SupportDeskClient("http://x", transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    with pytest.raises(ValueError):
        client.compress_and_upload(make_image(10, 10))
