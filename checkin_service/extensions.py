from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager

db = SQLAlchemy()
jwt = JWTManager()

# Revoked token ids (logout, failed or cancelled face step)
BLOCKLIST = set()
