"""
Face Reference Model
One stored reference image per user; rewritten on re-registration.
"""

from datetime import datetime, timezone
from checkin_service.extensions import db


class FaceReference(db.Model):
    __tablename__ = "admin_face_auth"

    id = db.Column(db.Integer, primary_key=True)
    # Opaque identifier from the caller, not a foreign key
    user_id = db.Column(db.String(64), unique=True, nullable=False)
    face_image_data = db.Column(db.Text, nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<FaceReference {self.user_id}>"
