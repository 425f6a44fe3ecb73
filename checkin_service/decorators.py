"""
Route guards built on flask_jwt_extended.
Face tokens (issued between the password and face steps) are refused here.
"""

from functools import wraps
from flask import current_app, g
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from checkin_service.exceptions import ApprovalPendingError, AuthorizationError
from checkin_service.services.user_service import get_role_or_raise


def _load_approved_role():
    verify_jwt_in_request()
    if get_jwt().get('face_pending'):
        raise AuthorizationError('Face verification required')

    role = get_role_or_raise(get_jwt_identity())
    if not role.approved:
        raise ApprovalPendingError()
    g.current_role = role
    return role


def approved_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        _load_approved_role()
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        role = _load_approved_role()
        if not role.is_admin:
            raise AuthorizationError('Administrator access required')
        if current_app.config['FACE_AUTH_REQUIRED'] and not get_jwt().get('face_verified'):
            raise AuthorizationError('Face verification required')
        return fn(*args, **kwargs)
    return wrapper
