from flask import Blueprint, jsonify
from flask_login import login_required

from samity.routes import json_body, admin_required
from samity.services.settings_service import get_settings, update_settings

settings_bp = Blueprint('settings', __name__, url_prefix='/api/settings')


@settings_bp.route('', methods=['GET'])
@login_required
def show():
    return jsonify(get_settings().to_dict())


@settings_bp.route('', methods=['PATCH', 'PUT'])
@admin_required
def update():
    return jsonify(update_settings(json_body()).to_dict())
