"""
Scan Service
Marks guests as arrived, by scanned token or by id.
"""

import logging
from datetime import datetime, timezone
from sqlalchemy.exc import SQLAlchemyError
from checkin_service.extensions import db
from checkin_service.models.guest import Guest
from checkin_service.exceptions import DataAccessError, GuestNotFoundError, ValidationError
from checkin_service.services.guest_service import get_guest_by_token, get_guest_or_raise

logger = logging.getLogger(__name__)


def check_in_guest(guest):
    """
    Flip checked_in false -> true.
    Returns (guest, newly_checked_in). The UPDATE only matches rows that are
    not yet checked in, so a repeat never rewrites checked_in_at.
    """
    if guest.checked_in:
        return guest, False

    try:
        updated = (
            Guest.query
            .filter_by(id=guest.id, checked_in=False)
            .update(
                {"checked_in": True, "checked_in_at": datetime.now(timezone.utc)},
                synchronize_session=False,
            )
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DataAccessError(f"Failed to check in guest: {e}")

    db.session.refresh(guest)
    if updated:
        logger.info("Guest %s checked in", guest.id)
    return guest, bool(updated)


def check_in_by_token(scan_token):
    """Look up the scanned (or typed) token and check the guest in."""
    scan_token = (scan_token or "").strip()
    if not scan_token:
        raise ValidationError("Missing scan_token")

    guest = get_guest_by_token(scan_token)
    if not guest:
        logger.info("Scan of unknown token rejected")
        raise GuestNotFoundError()
    return check_in_guest(guest)


def check_in_by_id(guest_id):
    return check_in_guest(get_guest_or_raise(guest_id))


def check_in_message(guest, newly_checked_in):
    if newly_checked_in:
        return f"{guest.name} checked in successfully"
    return f"{guest.name} has already been checked in"
