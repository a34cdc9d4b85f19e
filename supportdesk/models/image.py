from datetime import datetime, timezone
from supportdesk.extensions import db


class Image(db.Model):
    __tablename__ = "images"

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), unique=True, nullable=False)
    original_name = db.Column(db.String(255), nullable=False, default="")
    mime_type = db.Column(db.String(100), nullable=False)
    size = db.Column(db.Integer, nullable=False)
    compressed_size = db.Column(db.Integer, nullable=False)
    file_path = db.Column(db.String(1024), nullable=False)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def to_metadata(self):
        return {
            "id": self.id,
            "originalName": self.original_name,
            "mimeType": self.mime_type,
            "size": self.size,
            "compressedSize": self.compressed_size,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Image {self.id} {self.filename} [{self.mime_type}]>"
