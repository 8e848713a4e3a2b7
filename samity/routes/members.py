"""
MEMBER ROUTES
=============

Balance fields are read-only here; they move only through /api/transactions.
Profile changes and registration are admin actions.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required

from samity.routes import json_body, admin_required, require_self_or_admin
from samity.services.member_service import (
    create_member, update_member, toggle_member_status, get_member,
    list_members, get_member_summary, get_society_summary
)

members_bp = Blueprint('members', __name__, url_prefix='/api')


# ============== LIST / CREATE ==============
@members_bp.route('/members', methods=['GET'])
@login_required
def index():
    active = request.args.get('active')
    if active:
        active = active.lower() in ('1', 'true', 'yes')
    else:
        active = None
    return jsonify([m.to_dict() for m in list_members(active=active)])


@members_bp.route('/members', methods=['POST'])
@admin_required
def create():
    member = create_member(json_body())
    return jsonify({'user': member.user.to_dict(), 'member': member.to_dict()}), 201


# ============== SINGLE MEMBER ==============
@members_bp.route('/members/<int:member_id>', methods=['GET'])
@login_required
def show(member_id):
    return jsonify(get_member(member_id).to_dict())


@members_bp.route('/members/<int:member_id>', methods=['PATCH'])
@admin_required
def update(member_id):
    member = update_member(member_id, json_body())
    return jsonify(member.to_dict())


@members_bp.route('/members/<int:member_id>/toggle-status', methods=['POST'])
@admin_required
def toggle_status(member_id):
    return jsonify(toggle_member_status(member_id).to_dict())


# ============== SUMMARIES ==============
@members_bp.route('/members/<int:member_id>/summary', methods=['GET'])
@login_required
def summary(member_id):
    require_self_or_admin(member_id)
    return jsonify(get_member_summary(member_id))


@members_bp.route('/summary', methods=['GET'])
@admin_required
def society_summary():
    return jsonify(get_society_summary())
