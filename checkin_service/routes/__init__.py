from checkin_service.routes.auth import auth_bp
from checkin_service.routes.checkin import checkin_bp
from checkin_service.routes.face import face_bp
from checkin_service.routes.guests import guests_bp
from checkin_service.routes.users import users_bp
