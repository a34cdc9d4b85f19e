"""Store uploaded images and look them up again.

The storage and the database session are passed in by the caller; nothing
here reaches for application globals.
"""
import logging
import re

from supportdesk.errors import ImageNotFound, InvalidImageId, PersistenceError
from supportdesk.models.image import Image
from supportdesk.models.user import User
from supportdesk.services import image_service
from supportdesk.services.storage_service import generate_filename

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"[1-9][0-9]*")

# Largest value the Integer primary/foreign key columns hold
MAX_DB_ID = 2**31 - 1


def _out_of_range(digits):
    return len(digits) > len(str(MAX_DB_ID)) or int(digits) > MAX_DB_ID


def parse_image_id(raw):
    """Validate a path segment as a positive integer identifier.

    Ids beyond the column range are well formed but can never have been
    issued.
    """
    raw = str(raw)
    if not _ID_RE.fullmatch(raw):
        raise InvalidImageId()
    if _out_of_range(raw):
        raise ImageNotFound()
    return int(raw)


def parse_user_id(raw):
    """Owning user from the X-User-ID header; anything but a positive int is ignored."""
    if raw is None:
        return None
    raw = str(raw).strip()
    if not _ID_RE.fullmatch(raw) or _out_of_range(raw):
        return None
    return int(raw)


def store_upload(
    storage,
    session,
    data,
    original_name,
    declared_type=None,
    reported_type=None,
    original_size=None,
    compressed_size=None,
    user_id=None,
    max_size=image_service.MAX_FILE_SIZE,
):
    """Admit, write and register one uploaded image.

    Bytes are written before the record is inserted. If the insert fails
    the file is removed again (once; a failed removal is only logged).

    Returns:
        the committed Image record

    Raises:
        FileTooLarge / FileTypeNotAllowed from the admission policy
        PersistenceError when the write or the insert fails
    """
    received = len(data)
    image_service.check_admission(original_name, received, declared_type, max_size)

    mime_type = image_service.normalize_mime_type(
        original_name, declared_type, reported_type
    )
    filename = generate_filename(original_name, mime_type)

    # Weak reference, unknown users are dropped
    if user_id is not None and session.get(User, user_id) is None:
        logger.info("Ignoring unknown user %s on upload", user_id)
        user_id = None

    try:
        path = storage.save(filename, data)
    except OSError as e:
        logger.exception("Failed to write upload %s", filename)
        raise PersistenceError("Failed to store image") from e

    image = Image(
        filename=filename,
        original_name=original_name[:255],
        mime_type=mime_type,
        size=image_service.reported_size(original_size, received),
        compressed_size=image_service.reported_size(compressed_size, received),
        file_path=path,
        user_id=user_id,
    )
    try:
        session.add(image)
        session.commit()
    except Exception as e:
        logger.exception("Failed to record image %s, removing file", filename)
        session.rollback()
        if not storage.delete(path):
            logger.error("Orphaned upload left on disk: %s", path)
        raise PersistenceError("Failed to save image metadata") from e

    logger.info(
        "Stored image %d (%s, %d bytes) for user %s",
        image.id, filename, received, user_id,
    )
    return image


def get_image(session, image_id):
    """Image record by id, or ImageNotFound."""
    image = session.get(Image, image_id)
    if not image:
        raise ImageNotFound()
    return image


def get_image_file(storage, session, image_id):
    """Record whose bytes are still on disk.

    A record pointing at a missing file is reported as not found.
    """
    image = get_image(session, image_id)
    if not storage.exists(image.file_path):
        logger.warning("Image %d points at missing file %s", image.id, image.file_path)
        raise ImageNotFound()
    return image


def find_orphans(storage, session):
    """Files in the storage directory that no record points at."""
    known = {name for (name,) in session.query(Image.filename).all()}
    return [name for name in storage.list_files() if name not in known]
