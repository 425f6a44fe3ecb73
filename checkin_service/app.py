"""
Check-In Service: Flask application
Guest list, QR check-in, staff approval and the face verification function.
"""

import logging
import os
from datetime import datetime, timezone
from dotenv import load_dotenv
from flask import Flask, jsonify
from flasgger import Swagger
from sqlalchemy import text
from checkin_service.extensions import BLOCKLIST, db, jwt
from checkin_service.exceptions import CheckinServiceException
from checkin_service.logging_config import setup_logging
from checkin_service.models import Guest, User, UserRole, FaceReference  # Register models

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_AI_GATEWAY_URL = 'https://ai.gateway.lovable.dev/v1/chat/completions'
DEFAULT_AI_MODEL = 'google/gemini-2.5-flash'


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _database_uri():
    if os.environ.get('DATABASE_URL'):
        return os.environ['DATABASE_URL']
    db_user = os.environ.get('DB_USER', 'checkin_svc_user')
    db_pass = os.environ.get('DB_PASS', 'password')
    db_host = os.environ.get('DB_HOST', 'checkin-db')
    db_name = os.environ.get('DB_NAME', 'checkin_db')
    return f"postgresql://{db_user}:{db_pass}@{db_host}/{db_name}"


def create_app(config=None):
    app = Flask(__name__)

    # Configuration
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_uri()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['JWT_SECRET_KEY'] = os.environ.get('JWT_SECRET', 'dev-secret-change-me')
    app.config['ADMIN_EMAIL'] = os.environ.get('ADMIN_EMAIL', 'admin@example.com')
    app.config['ADMIN_ONLY_LOGIN'] = _env_flag('ADMIN_ONLY_LOGIN', False)
    app.config['FACE_AUTH_REQUIRED'] = _env_flag('FACE_AUTH_REQUIRED', True)
    app.config['AI_GATEWAY_URL'] = os.environ.get('AI_GATEWAY_URL', DEFAULT_AI_GATEWAY_URL)
    app.config['AI_GATEWAY_API_KEY'] = os.environ.get('AI_GATEWAY_API_KEY')
    app.config['AI_MODEL'] = os.environ.get('AI_MODEL', DEFAULT_AI_MODEL)
    app.config['AI_GATEWAY_TIMEOUT'] = float(os.environ.get('AI_GATEWAY_TIMEOUT', '30'))
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')
    app.config['LOG_DIR'] = os.environ.get('LOG_DIR')
    app.config['CREATE_TABLES'] = _env_flag('CREATE_TABLES', False)

    if config:
        app.config.update(config)

    setup_logging(app, app.config['LOG_LEVEL'], app.config['LOG_DIR'])

    # Initialize Extensions
    db.init_app(app)
    jwt.init_app(app)

    @jwt.token_in_blocklist_loader
    def check_if_token_in_blocklist(jwt_header, jwt_payload):
        return jwt_payload['jti'] in BLOCKLIST

    @app.errorhandler(CheckinServiceException)
    def handle_service_exception(e):
        if e.status_code >= 500:
            logger.error("Request failed: %s", e)
        return jsonify(e.to_dict()), e.status_code

    Swagger(app)

    # Register Blueprints
    from checkin_service.routes import auth_bp, checkin_bp, face_bp, guests_bp, users_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(guests_bp)
    app.register_blueprint(checkin_bp)
    app.register_blueprint(users_bp, url_prefix='/users')
    app.register_blueprint(face_bp, url_prefix='/functions')

    @app.route('/health')
    def health():
        try:
            db.session.execute(text('SELECT 1'))
            return jsonify({
                "service": "checkin-service",
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }), 200
        except Exception as e:
            return jsonify({"service": "checkin-service", "status": "unhealthy", "error": str(e)}), 503

    @app.cli.command('init-db')
    def init_db():
        """Create all tables."""
        db.create_all()
        print('Tables created')

    if app.config['CREATE_TABLES']:
        with app.app_context():
            db.create_all()

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
