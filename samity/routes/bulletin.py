"""
NOTICE & EVENT ROUTES
=====================
"""

from flask import Blueprint, jsonify
from flask_login import login_required

from samity.routes import json_body, admin_required
from samity.services.bulletin_service import (
    create_notice, list_notices, create_event, list_events
)

bulletin_bp = Blueprint('bulletin', __name__, url_prefix='/api')


@bulletin_bp.route('/notices', methods=['GET'])
@login_required
def notices():
    return jsonify([n.to_dict() for n in list_notices()])


@bulletin_bp.route('/notices', methods=['POST'])
@admin_required
def add_notice():
    return jsonify(create_notice(json_body()).to_dict()), 201


@bulletin_bp.route('/events', methods=['GET'])
@login_required
def events():
    return jsonify([e.to_dict() for e in list_events()])


@bulletin_bp.route('/events', methods=['POST'])
@admin_required
def add_event():
    return jsonify(create_event(json_body()).to_dict()), 201
