import logging
from supportdesk.extensions import db
from supportdesk.errors import ValidationError
from supportdesk.models.user import User
from supportdesk.models.support_request import SupportRequest
from supportdesk.services import ai_service

logger = logging.getLogger(__name__)


def _clean_image_ids(raw):
    if not isinstance(raw, list):
        return []
    ids = []
    for value in raw:
        try:
            value = int(value)
        except (TypeError, ValueError):
            continue
        if value > 0:
            ids.append(value)
    return ids


def submit_request(user_id, issue, logs="", image_ids=None):
    """Relay an issue to the AI and store the request with its answer.

    Raises:
        ValidationError when the issue is empty
        RuntimeError when the AI call fails (nothing is stored)
    """
    issue = (issue or "").strip()
    if not issue:
        raise ValidationError("Please describe your issue")
    logs = logs or ""

    user = db.session.get(User, user_id) if user_id else None

    solution = ai_service.generate_solution(issue, logs)

    request_row = SupportRequest(
        user_id=user.id if user else None,
        issue=issue,
        logs=logs,
        image_ids=_clean_image_ids(image_ids),
        ai_response=solution,
    )
    db.session.add(request_row)
    db.session.commit()
    logger.info("Support request %d answered", request_row.id)
    return request_row


def list_requests(user_id):
    """A user's support requests, newest first."""
    return (
        SupportRequest.query.filter_by(user_id=user_id)
        .order_by(SupportRequest.created_at.desc(), SupportRequest.id.desc())
        .all()
    )


def get_stats():
    """Row counts for the `stats` command."""
    from supportdesk.models.image import Image

    return {
        "users": db.session.query(db.func.count(User.id)).scalar(),
        "support_requests": db.session.query(db.func.count(SupportRequest.id)).scalar(),
        "images": db.session.query(db.func.count(Image.id)).scalar(),
    }
