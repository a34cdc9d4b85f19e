from flask import Blueprint

images_bp = Blueprint("images", __name__)

from supportdesk.blueprints.images import views  # noqa: F401, E402
