"""
Face Verification Function
POST /functions/verify-face  {capturedImage, userId, action} -> {success, message}
Stateless and CORS-open; every call is independent apart from the stored
reference image.
"""

import logging
from flask import Blueprint, jsonify, request
from checkin_service.exceptions import CheckinServiceException
from checkin_service.services.face_service import run_face_action

face_bp = Blueprint('face', __name__)

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
}


@face_bp.after_request
def add_cors_headers(response):
    response.headers.update(CORS_HEADERS)
    return response


@face_bp.route('/verify-face', methods=['POST'])
def verify_face():
    """
    Register or verify a face
    register stores (or overwrites) the reference image for userId.
    verify compares it with capturedImage through the model gateway.
    ---
    tags:
      - Face
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - capturedImage
            - userId
            - action
          properties:
            capturedImage:
              type: string
            userId:
              type: string
            action:
              type: string
              enum: [register, verify]
    responses:
      200:
        description: "{success, message}; success=false for no match or no registered face"
      400:
        description: Invalid action or image
      402:
        description: AI service quota exhausted
      429:
        description: AI service rate limit
      500:
        description: Configuration or unexpected failure
      503:
        description: AI service unreachable
    """
    data = request.get_json(silent=True) or {}

    try:
        result = run_face_action(data.get('capturedImage'), data.get('userId'), data.get('action'))
    except CheckinServiceException as e:
        logger.warning("Face verification error: %s", e)
        return jsonify({'success': False, 'message': e.message}), e.status_code
    except Exception:
        logger.exception("Face verification error")
        return jsonify({'success': False, 'message': 'Face verification failed'}), 500

    return jsonify(result), 200
