"""
User Service
Accounts, role records and administrator approval.
"""

import logging
import re
import uuid
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from checkin_service.extensions import db
from checkin_service.models.user import User, UserRole
from checkin_service.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DataAccessError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

EMAIL_REGEX = r'^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$'
MIN_PASSWORD_LENGTH = 6


def _parse_user_id(user_id):
    if isinstance(user_id, uuid.UUID):
        return user_id
    try:
        return uuid.UUID(str(user_id))
    except (TypeError, ValueError):
        raise NotFoundError("User not found", error_code="USER_NOT_FOUND")


def is_admin_email(email):
    admin_email = current_app.config.get('ADMIN_EMAIL') or ''
    return email.strip().lower() == admin_email.strip().lower()


def register_user(email, password):
    """
    Create an account and its role record.
    The configured administrator email becomes an approved admin; everybody
    else starts as unapproved staff.
    """
    email = (email or '').strip()
    if not email or not password:
        raise ValidationError('Missing email or password')
    if not re.match(EMAIL_REGEX, email):
        raise ValidationError('Invalid email format')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
    if User.query.filter_by(email=email).first():
        raise ConflictError('Email already exists', error_code='EMAIL_EXISTS')

    admin = is_admin_email(email)
    user = User(email=email)
    user.set_password(password)
    user.role = UserRole(role='admin' if admin else 'staff', approved=admin)

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('Email already exists', error_code='EMAIL_EXISTS')
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DataAccessError(f'Database error: {e}')

    logger.info("Registered %s account %s", user.role.role, user.user_id)
    return user


def authenticate(email, password):
    if not email or not password:
        raise ValidationError('Missing email or password')

    if current_app.config.get('ADMIN_ONLY_LOGIN') and not is_admin_email(email):
        raise AuthorizationError('Only the administrator can access this system.')

    user = User.query.filter_by(email=email.strip()).first()
    if not user or not user.check_password(password):
        logger.info("Failed login attempt")
        raise AuthenticationError('Invalid email or password')
    return user


def get_user(user_id):
    return db.session.get(User, _parse_user_id(user_id))


def get_role(user_id):
    return UserRole.query.filter_by(user_id=_parse_user_id(user_id)).first()


def get_role_or_raise(user_id):
    role = get_role(user_id)
    if not role:
        raise AuthorizationError('No role assigned to this account')
    return role


def list_roles():
    """Role records split the way the management screen shows them."""
    roles = UserRole.query.order_by(UserRole.created_at.desc()).all()
    return {
        'pending': [r.to_dict() for r in roles if not r.approved and r.role == 'staff'],
        'approved': [r.to_dict() for r in roles if r.approved],
    }


def set_approval(user_id, approved):
    role = get_role(user_id)
    if not role:
        raise NotFoundError('User not found', error_code='USER_NOT_FOUND')
    if not approved and role.is_admin:
        raise ValidationError('Administrator access cannot be revoked')

    role.approved = approved
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DataAccessError(f"Failed to {'approve' if approved else 'revoke'} user: {e}")

    logger.info("User %s %s", user_id, "approved" if approved else "revoked")
    return role
