"""HTTP client for the SupportDesk API.

Compresses images locally before uploading them, the same way the browser
front end does.
"""
import logging
import mimetypes
import os
import httpx

from supportdesk.services.image_service import compress

logger = logging.getLogger(__name__)

UPLOAD_MAX_WIDTH = 1920
UPLOAD_MAX_HEIGHT = 1080
UPLOAD_QUALITY = 0.85


class UploadError(RuntimeError):
    """Server refused or failed an upload."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SupportDeskClient:
    def __init__(self, base_url, user_id=None, timeout=30.0, transport=None):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self._http = httpx.Client(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _headers(self):
        if self.user_id:
            return {"X-User-ID": str(self.user_id)}
        return {}

    @staticmethod
    def _error_message(resp):
        try:
            return resp.json().get("message") or f"Upload failed: {resp.reason_phrase}"
        except ValueError:
            return f"Upload failed: {resp.reason_phrase}"

    def compress_and_upload(self, source, filename=None, mime_type=None):
        """Compress an image and upload it.

        Args:
            source: filesystem path, or raw bytes together with ``filename``
            filename: name reported to the server (defaults to the path's name)
            mime_type: type of the source (guessed from the name when missing)

        Returns:
            dict with imageId, previewUrl, compressedSize and originalSize

        Raises:
            ImageDecodeError / ImageEncodeError when compression fails
            UploadError when the server rejects the upload
        """
        if isinstance(source, (bytes, bytearray)):
            if not filename:
                raise ValueError("filename is required when uploading raw bytes")
            original = bytes(source)
        else:
            with open(source, "rb") as fh:
                original = fh.read()
            filename = filename or os.path.basename(source)

        mime_type = mime_type or mimetypes.guess_type(filename)[0]
        result = compress(
            original, UPLOAD_MAX_WIDTH, UPLOAD_MAX_HEIGHT, UPLOAD_QUALITY,
            mime_type=mime_type,
        )
        compressed = result.data

        resp = self._http.post(
            "/upload-image",
            headers=self._headers(),
            files={"image": (filename, compressed, result.mime_type)},
            data={
                "originalSize": str(len(original)),
                "compressedSize": str(len(compressed)),
                "mimeType": mime_type or result.mime_type,
            },
        )
        if resp.status_code >= 400:
            message = self._error_message(resp)
            logger.error("Upload of %s failed: %s", filename, message)
            raise UploadError(message, resp.status_code)

        data = resp.json()
        return {
            "imageId": data["imageId"],
            "previewUrl": data.get("previewUrl") or f"{self.base_url}/image/{data['imageId']}",
            "compressedSize": len(compressed),
            "originalSize": len(original),
        }

    def get_image(self, image_id):
        """Stored bytes of an image."""
        resp = self._http.get(f"/image/{image_id}")
        resp.raise_for_status()
        return resp.content

    def get_image_metadata(self, image_id):
        resp = self._http.get(f"/image/{image_id}/metadata")
        resp.raise_for_status()
        return resp.json()["image"]
