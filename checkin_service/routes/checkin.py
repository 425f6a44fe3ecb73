"""
Check-In Routes
Handles POST /checkin/scan (staff QR scan or typed token at the door)
"""

from flask import Blueprint, jsonify, request
from checkin_service.decorators import approved_required
from checkin_service.services.scan_service import check_in_by_token, check_in_message

checkin_bp = Blueprint('checkin', __name__)


@checkin_bp.route('/checkin/scan', methods=['POST'])
@approved_required
def scan():
    """
    Check a guest in by scan token
    ---
    tags:
      - Check-In
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - scan_token
          properties:
            scan_token:
              type: string
              description: decoded QR payload or manually entered token
    responses:
      200:
        description: Checked in, or already checked in (already_checked_in)
      400:
        description: Missing scan_token
      404:
        description: Guest not found
    """
    data = request.get_json(silent=True) or {}
    guest, newly_checked_in = check_in_by_token(data.get('scan_token'))
    return jsonify({
        "success": True,
        "already_checked_in": not newly_checked_in,
        "message": check_in_message(guest, newly_checked_in),
        "data": guest.to_dict()
    }), 200
