from flask import Blueprint, jsonify
from checkin_service.decorators import admin_required
from checkin_service.services.user_service import list_roles, set_approval

users_bp = Blueprint('users', __name__)


@users_bp.route('', methods=['GET'])
@admin_required
def list_users():
    """
    Staff accounts waiting for approval, and approved accounts
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: pending and approved role records
      403:
        description: Administrator access required
    """
    return jsonify(list_roles()), 200


@users_bp.route('/<user_id>/approve', methods=['POST'])
@admin_required
def approve_user(user_id):
    """
    Approve a staff account
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        required: true
        type: string
    responses:
      200:
        description: User approved
      404:
        description: User not found
    """
    role = set_approval(user_id, True)
    return jsonify({'message': 'User approved successfully', 'user': role.to_dict()}), 200


@users_bp.route('/<user_id>/revoke', methods=['POST'])
@admin_required
def revoke_user(user_id):
    """
    Revoke a staff account's access
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        required: true
        type: string
    responses:
      200:
        description: User access revoked
      400:
        description: Administrators cannot be revoked
      404:
        description: User not found
    """
    role = set_approval(user_id, False)
    return jsonify({'message': 'User access revoked', 'user': role.to_dict()}), 200
