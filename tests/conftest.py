import io
import itertools
import pytest
from PIL import Image as PILImage
from supportdesk import create_app
from supportdesk.extensions import db as _db


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create application for testing."""
    upload_dir = tmp_path_factory.mktemp("uploads")
    app = create_app("testing", {"UPLOAD_FOLDER": str(upload_dir)})
    with app.app_context():
        _db.create_all()
        yield app
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    """Per-test database session with rollback."""
    with app.app_context():
        _db.session.begin_nested()
        yield _db
        _db.session.rollback()


@pytest.fixture
def storage(app):
    return app.extensions["image_storage"]


_emails = itertools.count(1)


@pytest.fixture
def unique_email():
    return f"user{next(_emails)}@example.com"


def make_image_bytes(width, height, fmt="JPEG", color=(200, 30, 30), mode="RGB"):
    """Encode a solid-color test image."""
    img = PILImage.new(mode, (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    return make_image_bytes
