from datetime import datetime, timezone
from supportdesk.extensions import db


class SupportRequest(db.Model):
    __tablename__ = "support_requests"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    issue = db.Column(db.Text, nullable=False)
    logs = db.Column(db.Text, default="")
    image_ids = db.Column(db.JSON, default=list)  # [12, 13]
    ai_response = db.Column(db.Text)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "issue": self.issue,
            "logs": self.logs or "",
            "ai_response": self.ai_response or "",
            "image_ids": self.image_ids or [],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<SupportRequest {self.id} user={self.user_id}>"
