"""
AUTHENTICATION ROUTES
=====================
"""

from flask import Blueprint, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user

from samity.models import MemberRole
from samity.routes import json_body
from samity.services.auth_service import register_user, authenticate
from samity.services.errors import AuthorizationError

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@auth_bp.route('/register', methods=['POST'])
def register():
    data = json_body()
    # Only a signed-in admin may create another admin
    if data.get('role') == MemberRole.ADMIN.value and not (
            current_user.is_authenticated and current_user.is_admin):
        raise AuthorizationError("Admin access required")
    user = register_user(data.get('username'), data.get('password'), data.get('role'))
    return jsonify(user.to_dict()), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    user, member = authenticate(data.get('username'), data.get('password'))
    login_user(user, remember=bool(data.get('remember', False)))
    current_app.logger.info("User %s logged in", user.username)
    return jsonify({
        'user': user.to_dict(),
        'member': member.to_dict() if member else None,
    })


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'status': 'success'})


@auth_bp.route('/me')
@login_required
def me():
    member = current_user.member
    return jsonify({
        'user': current_user.to_dict(),
        'member': member.to_dict() if member else None,
    })
