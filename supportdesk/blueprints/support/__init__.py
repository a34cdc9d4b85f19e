from flask import Blueprint

support_bp = Blueprint("support", __name__)

from supportdesk.blueprints.support import views  # noqa: F401, E402
