import logging
from flask import current_app
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

from supportdesk.services.storage_service import LocalImageStorage

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()
cors = CORS()


def init_storage(app):
    """Build the image storage for this app and create its directory."""
    storage = LocalImageStorage(app.config["UPLOAD_FOLDER"])
    storage.init()
    app.extensions["image_storage"] = storage
    logger.info("Image uploads stored in %s", storage.root)
    return storage


def get_storage():
    return current_app.extensions["image_storage"]
