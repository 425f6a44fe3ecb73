"""
Guest Model
guest_type: regular | vip
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Uuid
from checkin_service.extensions import db

GUEST_TYPES = ("regular", "vip")


class Guest(db.Model):
    __tablename__ = "guests"

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    guest_type = db.Column(
        db.Enum(*GUEST_TYPES, name="guest_type"),
        nullable=False,
        default="regular"
    )
    qr_code = db.Column(db.String(64), unique=True, nullable=False)
    checked_in = db.Column(db.Boolean, nullable=False, default=False)
    checked_in_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    @property
    def is_vip(self):
        return self.guest_type == "vip"

    def to_dict(self):
        return {
            "id":            str(self.id),
            "name":          self.name,
            "email":         self.email,
            "phone":         self.phone,
            "guest_type":    self.guest_type,
            "qr_code":       self.qr_code,
            "checked_in":    bool(self.checked_in),
            "checked_in_at": self.checked_in_at.isoformat() if self.checked_in_at else None,
            "created_at":    self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Guest {self.name} {self.qr_code}>"
