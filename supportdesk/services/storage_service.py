"""Local disk storage for uploaded image bytes."""
import logging
import mimetypes
import os
import re
import secrets
import time
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

_SAFE_EXT_RE = re.compile(r"\.[a-z0-9]{1,10}")


def _stored_extension(original_name, mime_type=None):
    """Extension kept on disk: the client's if it survives sanitizing intact,
    else one derived from the MIME type, else ``.bin``."""
    _, raw_ext = os.path.splitext(original_name or "")
    raw_ext = raw_ext.lower()
    _, safe_ext = os.path.splitext(secure_filename(original_name or ""))
    safe_ext = safe_ext.lower()
    if raw_ext and raw_ext == safe_ext and _SAFE_EXT_RE.fullmatch(safe_ext):
        return safe_ext
    if mime_type:
        guessed = mimetypes.guess_extension(mime_type)
        if guessed:
            return guessed
    return ".bin"


def generate_filename(original_name, mime_type=None):
    """Unique stored name: epoch millis, random hex suffix, sanitized extension."""
    ext = _stored_extension(original_name, mime_type)
    return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{ext}"


class LocalImageStorage:
    """Directory of stored images, owned by the server process.

    Constructed once per application and handed to the services that read or
    write image bytes.
    """

    def __init__(self, root):
        self.root = os.path.abspath(root)

    def init(self):
        os.makedirs(self.root, exist_ok=True)

    def path_for(self, filename):
        return os.path.join(self.root, os.path.basename(filename))

    def save(self, filename, data):
        """Write bytes under ``filename`` and return the file path.

        Fails if the name is already taken.
        """
        path = self.path_for(filename)
        with open(path, "xb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        return path

    def exists(self, path):
        return bool(path) and os.path.isfile(path)

    def delete(self, path):
        """Remove a stored file. Returns False if it could not be removed."""
        try:
            os.remove(path)
        except FileNotFoundError:
            return True
        except OSError:
            logger.exception("Failed to delete stored file %s", path)
            return False
        return True

    def list_files(self):
        """Names of all regular files in the storage directory."""
        return sorted(
            name
            for name in os.listdir(self.root)
            if os.path.isfile(os.path.join(self.root, name))
        )
