"""AI support relay and request history."""
import logging
from flask import jsonify, request
from supportdesk.blueprints.support import support_bp
from supportdesk.errors import ValidationError
from supportdesk.services import support_service
from supportdesk.services.upload_service import parse_user_id

logger = logging.getLogger(__name__)

AI_FAILURE_MESSAGE = "Error: Could not fetch AI response."


@support_bp.route("/support", methods=["POST"])
def submit_support_request():
    data = request.get_json(silent=True) or {}

    try:
        support_request = support_service.submit_request(
            user_id=parse_user_id(data.get("userId")),
            issue=data.get("issue"),
            logs=data.get("logs") or "",
            image_ids=data.get("imageIds"),
        )
    except ValidationError as e:
        return jsonify(solution=e.message, message=e.message), e.status_code
    except Exception:
        logger.exception("Support request failed")
        return jsonify(solution=AI_FAILURE_MESSAGE), 500

    return jsonify(
        solution=support_request.ai_response,
        requestId=support_request.id,
    )


@support_bp.route("/support-issues/<int:user_id>")
def list_support_issues(user_id):
    requests = support_service.list_requests(user_id)
    return jsonify(issues=[r.to_dict() for r in requests])
