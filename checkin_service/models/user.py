import uuid
import bcrypt
from sqlalchemy import Uuid
from checkin_service.extensions import db

ROLES = ("admin", "staff")


class User(db.Model):
    __tablename__ = 'users'

    user_id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    role = db.relationship('UserRole', back_populates='user', uselist=False,
                           cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def check_password(self, password):
        return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))

    def to_dict(self):
        return {
            'user_id': str(self.user_id),
            'email': self.email,
            'role': self.role.role if self.role else None,
            'approved': bool(self.role.approved) if self.role else False
        }


class UserRole(db.Model):
    __tablename__ = 'user_roles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(Uuid(as_uuid=True), db.ForeignKey('users.user_id'), unique=True, nullable=False)
    role = db.Column(db.Enum(*ROLES, name='app_role'), nullable=False, default='staff')
    approved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    user = db.relationship('User', back_populates='role')

    @property
    def is_admin(self):
        return self.role == 'admin'

    def to_dict(self):
        return {
            'user_id': str(self.user_id),
            'email': self.user.email if self.user else None,
            'role': self.role,
            'approved': bool(self.approved),
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
