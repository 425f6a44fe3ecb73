from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    get_jwt,
    get_jwt_identity,
    jwt_required,
)
import datetime
import logging
from checkin_service.extensions import BLOCKLIST
from checkin_service.exceptions import CheckinServiceException, NotFoundError, ValidationError
from checkin_service.services.face_service import has_reference, run_face_action
from checkin_service.services.user_service import authenticate, get_user, register_user

auth_bp = Blueprint('auth', __name__)

logger = logging.getLogger(__name__)

FACE_TOKEN_TTL = datetime.timedelta(minutes=5)


def _issue_tokens(user, face_verified=False):
    claims = {'face_verified': face_verified}
    access_token = create_access_token(identity=str(user.user_id), additional_claims=claims,
                                       expires_delta=datetime.timedelta(minutes=15))
    refresh_token = create_refresh_token(identity=str(user.user_id), additional_claims=claims,
                                         expires_delta=datetime.timedelta(days=7))
    return {
        'access_token': access_token,
        'refresh_token': refresh_token,
        'user': user.to_dict()
    }


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Register a new account
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
            password:
              type: string
    responses:
      201:
        description: Account created (staff accounts wait for approval)
      400:
        description: Invalid input
      409:
        description: Email already exists
    """
    data = request.get_json(silent=True) or {}
    user = register_user(data.get('email'), data.get('password'))
    return jsonify({
        'message': 'User registered successfully',
        'user_id': str(user.user_id),
        'role': user.role.role,
        'approved': user.role.approved
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Authenticate with email and password
    Staff receive tokens straight away. An administrator receives a
    short-lived face token and must finish at /api/auth/face.
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
            password:
              type: string
    responses:
      200:
        description: Login successful or face step required
      401:
        description: Invalid credentials
      403:
        description: Login restricted to the administrator
    """
    data = request.get_json(silent=True) or {}
    user = authenticate(data.get('email'), data.get('password'))

    if user.role and user.role.is_admin and current_app.config['FACE_AUTH_REQUIRED']:
        face_mode = 'verify' if has_reference(user.user_id) else 'register'
        face_token = create_access_token(
            identity=str(user.user_id),
            additional_claims={'face_pending': True, 'face_mode': face_mode},
            expires_delta=FACE_TOKEN_TTL
        )
        message = ('Please register your face for secure authentication.'
                   if face_mode == 'register' else 'Face verification required')
        return jsonify({
            'message': message,
            'face_required': True,
            'face_mode': face_mode,
            'face_token': face_token
        }), 200

    body = _issue_tokens(user)
    body.update({'message': 'Login successful', 'face_required': False})
    return jsonify(body), 200


@auth_bp.route('/face', methods=['POST'])
@jwt_required()
def face_step():
    """
    Complete an administrator login with a face capture
    The mode (register or verify) was fixed at login. A failed verification
    revokes the face token; the user has to sign in again.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - capturedImage
          properties:
            capturedImage:
              type: string
              description: data:image/jpeg;base64,... still from the camera
    responses:
      200:
        description: Face step finished (see success)
      400:
        description: Not a face token or invalid image
    """
    claims = get_jwt()
    if not claims.get('face_pending'):
        raise ValidationError('No face verification pending for this token')

    face_mode = claims.get('face_mode', 'verify')
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    try:
        result = run_face_action(data.get('capturedImage'), user_id, face_mode)
    except CheckinServiceException:
        if face_mode == 'verify':
            BLOCKLIST.add(claims['jti'])
        raise
    except Exception as e:
        if face_mode == 'verify':
            BLOCKLIST.add(claims['jti'])
        logger.error("Face step failed for %s: %s", user_id, e)
        return jsonify({'success': False, 'message': 'Face verification failed'}), 500

    if not result['success']:
        if face_mode == 'verify':
            BLOCKLIST.add(claims['jti'])
            logger.info("Admin %s signed out after failed face verification", user_id)
        return jsonify(result), 200

    BLOCKLIST.add(claims['jti'])
    body = _issue_tokens(get_user(user_id), face_verified=True)
    body.update(result)
    return jsonify(body), 200


@auth_bp.route('/face/cancel', methods=['POST'])
@jwt_required()
def cancel_face_step():
    """
    Abandon the face step (revokes the face token)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Signed out
    """
    BLOCKLIST.add(get_jwt()['jti'])
    return jsonify({'message': 'Signed out'}), 200


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """
    Refresh access token
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: New access token
      401:
        description: Invalid refresh token
    """
    current_user_id = get_jwt_identity()
    face_verified = bool(get_jwt().get('face_verified'))
    new_access_token = create_access_token(identity=current_user_id,
                                           additional_claims={'face_verified': face_verified},
                                           expires_delta=datetime.timedelta(minutes=15))
    return jsonify({'access_token': new_access_token}), 200


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    """
    Logout user (Revoke token)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logout successful
    """
    BLOCKLIST.add(get_jwt()['jti'])
    return jsonify({'message': 'Logout successful'}), 200


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    """
    Current account with role and approval state
    Polled by the approval-pending screen.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Account details
      404:
        description: User not found
    """
    user = get_user(get_jwt_identity())
    if not user:
        raise NotFoundError('User not found', error_code='USER_NOT_FOUND')
    return jsonify(user.to_dict()), 200
