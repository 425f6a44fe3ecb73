from flask import Blueprint, Response, jsonify, request
from checkin_service.decorators import admin_required, approved_required
from checkin_service.services.guest_service import (
    create_guest,
    delete_guest,
    get_guest_or_raise,
    guest_stats,
    list_guests,
)
from checkin_service.services.qr_service import render_qr_data_url, render_qr_png
from checkin_service.services.scan_service import check_in_by_id, check_in_message

guests_bp = Blueprint('guests', __name__)


@guests_bp.route('/guests', methods=['GET'])
@approved_required
def list_guests_route():
    """
    List guests, newest first
    ---
    tags:
      - Guests
    security:
      - Bearer: []
    parameters:
      - name: guest_type
        in: query
        type: string
        enum: [regular, vip, standard, priority]
        required: false
    responses:
      200:
        description: Guest list
      403:
        description: Account not approved
    """
    guests = list_guests(request.args.get('guest_type'))
    return jsonify({
        "success": True,
        "data": [g.to_dict() for g in guests]
    }), 200


@guests_bp.route('/guests/stats', methods=['GET'])
@approved_required
def guest_stats_route():
    """
    Guest counts per category and checked in
    ---
    tags:
      - Guests
    security:
      - Bearer: []
    responses:
      200:
        description: Counts
    """
    return jsonify({"success": True, "data": guest_stats()}), 200


@guests_bp.route('/guests', methods=['POST'])
@admin_required
def create_guest_route():
    """
    Add a guest; the scan token is generated here
    ---
    tags:
      - Guests
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - name
          properties:
            name:
              type: string
            guest_type:
              type: string
              enum: [regular, vip, standard, priority]
            email:
              type: string
            phone:
              type: string
    responses:
      201:
        description: Guest created
      400:
        description: Name missing or unknown guest_type
      409:
        description: Scan token already in use
    """
    data = request.get_json(silent=True) or {}
    guest = create_guest(
        name=data.get("name"),
        guest_type=data.get("guest_type"),
        email=data.get("email"),
        phone=data.get("phone"),
    )
    return jsonify({
        "success": True,
        "message": "Guest added successfully",
        "data": guest.to_dict()
    }), 201


@guests_bp.route('/guests/<uuid:guest_id>', methods=['GET'])
@approved_required
def get_guest_route(guest_id):
    """
    Get a single guest
    ---
    tags:
      - Guests
    security:
      - Bearer: []
    parameters:
      - name: guest_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Guest details
      404:
        description: Guest not found
    """
    guest = get_guest_or_raise(guest_id)
    return jsonify({"success": True, "data": guest.to_dict()}), 200


@guests_bp.route('/guests/<uuid:guest_id>', methods=['DELETE'])
@admin_required
def delete_guest_route(guest_id):
    """
    Delete a guest
    ---
    tags:
      - Guests
    security:
      - Bearer: []
    parameters:
      - name: guest_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Guest deleted
      404:
        description: Guest not found
    """
    delete_guest(guest_id)
    return jsonify({"success": True, "message": "Guest deleted successfully"}), 200


@guests_bp.route('/guests/<uuid:guest_id>/qr', methods=['GET'])
@approved_required
def guest_qr_route(guest_id):
    """
    QR code for a guest's scan token
    ---
    tags:
      - Guests
    security:
      - Bearer: []
    parameters:
      - name: guest_id
        in: path
        type: string
        required: true
      - name: format
        in: query
        type: string
        enum: [png, data_url]
        default: png
    produces:
      - image/png
      - application/json
    responses:
      200:
        description: PNG image, or JSON with a data URL
      404:
        description: Guest not found
    """
    guest = get_guest_or_raise(guest_id)
    if request.args.get('format') == 'data_url':
        return jsonify({
            "success": True,
            "qr_code": guest.qr_code,
            "data_url": render_qr_data_url(guest)
        }), 200

    return Response(
        render_qr_png(guest),
        mimetype="image/png",
        headers={"Content-Disposition": f"inline; filename={guest.qr_code}.png"}
    )


@guests_bp.route('/guests/<uuid:guest_id>/check-in', methods=['POST'])
@approved_required
def manual_check_in_route(guest_id):
    """
    Check a guest in from the list (no scan)
    ---
    tags:
      - Check-In
    security:
      - Bearer: []
    parameters:
      - name: guest_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Checked in, or already checked in
      404:
        description: Guest not found
    """
    guest, newly_checked_in = check_in_by_id(guest_id)
    return jsonify({
        "success": True,
        "already_checked_in": not newly_checked_in,
        "message": check_in_message(guest, newly_checked_in),
        "data": guest.to_dict()
    }), 200
