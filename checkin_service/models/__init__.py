from checkin_service.models.guest import Guest, GUEST_TYPES
from checkin_service.models.user import User, UserRole, ROLES
from checkin_service.models.face_reference import FaceReference

__all__ = ["Guest", "GUEST_TYPES", "User", "UserRole", "ROLES", "FaceReference"]
