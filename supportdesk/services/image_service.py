import io
import math
import mimetypes
import os
import re
from collections import namedtuple
from PIL import Image as PILImage

from supportdesk.errors import FileTooLarge, FileTypeNotAllowed


ALLOWED_EXTENSIONS = {
    "jpeg", "jpg", "png", "gif", "webp", "bmp", "tiff", "tif", "svg", "jfif",
}
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB
# Size columns are 32-bit integers
MAX_REPORTED_SIZE = 2**31 - 1

# image/<subtype> made of header-safe token characters
_IMAGE_MIME_RE = re.compile(r"image/[a-z0-9][a-z0-9.+-]*")

DEFAULT_MAX_WIDTH = 1920
DEFAULT_MAX_HEIGHT = 1080
DEFAULT_QUALITY = 0.8


class ImageDecodeError(ValueError):
    """Source could not be parsed as an image."""


class ImageEncodeError(RuntimeError):
    """Re-encoding failed or produced no output."""


# ---------------------------------------------------------------------------
# Compression
# ---------------------------------------------------------------------------

def target_size(width, height, max_width, max_height):
    """Dimensions after fitting (width, height) inside the bounds.

    Never upscales. Both sides are scaled by the same ratio so the aspect
    ratio is preserved.
    """
    if width <= max_width and height <= max_height:
        return width, height
    ratio = min(max_width / width, max_height / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def _open_source(source):
    if isinstance(source, (bytes, bytearray)):
        return PILImage.open(io.BytesIO(source))
    return PILImage.open(source)


def _encoder_for(mime_type=None, source_format=None):
    """(Pillow format, MIME type) to encode with, falling back to JPEG."""
    PILImage.init()
    candidate = mime_type or PILImage.MIME.get(source_format or "")
    if candidate:
        for fmt, mime in PILImage.MIME.items():
            if mime == candidate.lower() and fmt in PILImage.SAVE:
                return fmt, mime
    return "JPEG", "image/jpeg"


CompressedImage = namedtuple("CompressedImage", "data mime_type width height")


def compress(
    source,
    max_width=DEFAULT_MAX_WIDTH,
    max_height=DEFAULT_MAX_HEIGHT,
    quality=DEFAULT_QUALITY,
    mime_type=None,
):
    """Downscale and re-encode an image before upload.

    Args:
        source: image bytes, a binary file object or a filesystem path
        max_width, max_height: bounds in pixels
        quality: encoder quality in [0, 1]
        mime_type: MIME type to encode as; the decoded format (or JPEG)
            is used when missing or not encodable

    Returns:
        CompressedImage with the encoded bytes, their MIME type and the
        output dimensions

    Raises:
        ImageDecodeError if the source is not a readable image
        ImageEncodeError if encoding fails or yields nothing
    """
    if max_width <= 0 or max_height <= 0:
        raise ValueError("max_width and max_height must be positive")
    if not 0 <= quality <= 1:
        raise ValueError("quality must be between 0 and 1")

    try:
        img = _open_source(source)
        img.load()
    except Exception as exc:
        raise ImageDecodeError("Failed to load image") from exc

    fmt, out_mime = _encoder_for(mime_type, img.format)

    width, height = target_size(img.width, img.height, max_width, max_height)
    if (width, height) != img.size:
        img = img.resize((width, height), PILImage.LANCZOS)

    if fmt == "JPEG" and img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    elif fmt == "WEBP" and img.mode not in ("RGB", "RGBA", "L"):
        img = img.convert("RGBA")

    save_kwargs = {}
    if fmt in ("JPEG", "WEBP"):
        save_kwargs["quality"] = max(1, min(95, int(round(quality * 100))))

    buffer = io.BytesIO()
    try:
        img.save(buffer, format=fmt, **save_kwargs)
    except Exception as exc:
        raise ImageEncodeError("Image compression failed") from exc

    data = buffer.getvalue()
    if not data:
        raise ImageEncodeError("Image compression failed")
    return CompressedImage(data, out_mime, width, height)


def compress_image(
    source,
    max_width=DEFAULT_MAX_WIDTH,
    max_height=DEFAULT_MAX_HEIGHT,
    quality=DEFAULT_QUALITY,
    mime_type=None,
):
    """Like ``compress`` but returns only the encoded bytes."""
    return compress(source, max_width, max_height, quality, mime_type).data


# ---------------------------------------------------------------------------
# Admission policy
# ---------------------------------------------------------------------------

def file_extension(filename):
    """Lower-cased extension without the dot, or '' when there is none."""
    return os.path.splitext(filename or "")[1].lower().lstrip(".")


def check_admission(filename, size, content_type, max_size=MAX_FILE_SIZE):
    """Apply the size and type rules to an uploaded file.

    Returns the lower-cased extension.

    Raises:
        FileTooLarge when ``size`` exceeds ``max_size``
        FileTypeNotAllowed when neither the extension nor the declared
            content type admit the file
    """
    if size > max_size:
        raise FileTooLarge()

    ext = file_extension(filename)
    if ext in ALLOWED_EXTENSIONS:
        return ext
    if ext and content_type and content_type.lower().startswith("image/"):
        return ext
    raise FileTypeNotAllowed(f".{ext}" if ext else "", content_type)


def normalize_mime_type(filename, declared=None, reported=None):
    """Pick the MIME type stored for an upload.

    ``.jfif`` is always JPEG. Otherwise the first image/* value among the
    declared part type and the reported form field wins, then a guess from
    the extension.
    """
    ext = file_extension(filename)
    if ext == "jfif":
        return "image/jpeg"
    for candidate in (declared, reported):
        if not candidate:
            continue
        candidate = candidate.split(";", 1)[0].strip().lower()
        if _IMAGE_MIME_RE.fullmatch(candidate):
            return candidate
    guessed, _ = mimetypes.guess_type(f"file.{ext}") if ext else (None, None)
    return guessed or "application/octet-stream"


def reported_size(value, fallback):
    """Self-reported byte count when present, numeric and storable, else ``fallback``."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number) or number < 0 or number > MAX_REPORTED_SIZE:
        return fallback
    return int(number)
