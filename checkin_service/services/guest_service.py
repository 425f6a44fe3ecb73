"""
Guest Service
Guest list CRUD and scan token generation.
"""

import logging
import secrets
import string
import time
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from checkin_service.extensions import db
from checkin_service.models.guest import Guest, GUEST_TYPES
from checkin_service.exceptions import (
    DataAccessError,
    DuplicateScanTokenError,
    GuestNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "GUEST"
TOKEN_ALPHABET = string.digits + string.ascii_lowercase

# Input aliases for the two categories
GUEST_TYPE_ALIASES = {
    "regular": "regular",
    "standard": "regular",
    "vip": "vip",
    "priority": "vip",
}


def normalize_guest_type(value):
    if value is None or value == "":
        return "regular"
    guest_type = GUEST_TYPE_ALIASES.get(str(value).strip().lower())
    if guest_type is None:
        raise ValidationError(
            f"guest_type must be one of: {', '.join(sorted(GUEST_TYPE_ALIASES))}"
        )
    return guest_type


def generate_scan_token():
    """GUEST-<epoch ms>-<9 random base36 chars>"""
    suffix = "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(9))
    return f"{TOKEN_PREFIX}-{int(time.time() * 1000)}-{suffix}"


def create_guest(name, guest_type=None, email=None, phone=None, qr_code=None):
    """
    Insert a guest. The scan token is generated here unless given and is
    never changed afterwards; the unique constraint rejects duplicates.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    qr_code = qr_code or generate_scan_token()

    guest = Guest(
        name=name,
        guest_type=normalize_guest_type(guest_type),
        email=(email or "").strip() or None,
        phone=(phone or "").strip() or None,
        qr_code=qr_code,
    )
    db.session.add(guest)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateScanTokenError(qr_code)
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DataAccessError(f"Failed to add guest: {e}")

    logger.info("Guest %s added (%s)", guest.id, guest.guest_type)
    return guest


def list_guests(guest_type=None):
    query = Guest.query
    if guest_type:
        query = query.filter_by(guest_type=normalize_guest_type(guest_type))
    return query.order_by(Guest.created_at.desc()).all()


def get_guest(guest_id):
    return db.session.get(Guest, guest_id)


def get_guest_or_raise(guest_id):
    guest = get_guest(guest_id)
    if not guest:
        raise GuestNotFoundError()
    return guest


def get_guest_by_token(qr_code):
    return Guest.query.filter_by(qr_code=qr_code).first()


def delete_guest(guest_id):
    guest = get_guest_or_raise(guest_id)
    db.session.delete(guest)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DataAccessError(f"Failed to delete guest: {e}")
    logger.info("Guest %s deleted", guest_id)


def guest_stats():
    guests = Guest.query.all()
    return {
        "total":      len(guests),
        "vip":        sum(1 for g in guests if g.guest_type == "vip"),
        "regular":    sum(1 for g in guests if g.guest_type == "regular"),
        "checked_in": sum(1 for g in guests if g.checked_in),
    }
