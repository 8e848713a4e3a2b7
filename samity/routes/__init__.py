from functools import wraps

from flask import request
from flask_login import current_user, login_required

from samity.services.errors import ValidationError, AuthorizationError


def admin_required(view):
    """Signed-in admins only."""
    @wraps(view)
    @login_required
    def wrapped(*args, **kwargs):
        if not current_user.is_admin:
            raise AuthorizationError("Admin access required")
        return view(*args, **kwargs)
    return wrapped


def require_self_or_admin(member_id):
    """Members may act on their own record; admins on any."""
    if current_user.is_admin:
        return
    own = current_user.member
    if own is None or str(own.id) != str(member_id):
        raise AuthorizationError("You can only act on your own account")


def json_body():
    """Request body as a dict, or ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_int(name):
    """Optional integer query parameter."""
    value = request.args.get(name)
    if value is None or value == '':
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", {'field': name})
