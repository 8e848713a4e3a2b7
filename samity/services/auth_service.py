"""
AUTH SERVICE
============

Login accounts. Members sign in with their phone number as username.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from samity.extensions import db
from samity.models import User, MemberRole
from samity.services.errors import (
    SamityError, ValidationError, DuplicateError, AuthenticationError
)
from samity.services.validation import required_text, choice

logger = logging.getLogger(__name__)


def get_user_by_username(username):
    return User.query.filter_by(username=username).first()


def create_user(username, password, role=MemberRole.USER.value):
    """Add a user to the session (flushed, not committed)."""
    username = required_text(username, 'username')
    if not password or not isinstance(password, str):
        raise ValidationError("password is required", {'field': 'password'})
    role = choice(role or MemberRole.USER.value, 'role', [r.value for r in MemberRole])

    if get_user_by_username(username):
        raise DuplicateError("Username already exists", {'field': 'username'})

    user = User(username=username, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    return user


def register_user(username, password, role=None):
    try:
        user = create_user(username, password, role)
        db.session.commit()
    except SamityError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        raise SamityError(f"Registration failed: {str(e)}")

    logger.info("User %s registered as %s", user.username, user.role)
    return user


def authenticate(username, password):
    """
    Verify credentials.

    Returns: (User, Member or None)
    """
    if not username or not password:
        raise ValidationError("Username and password required")

    user = get_user_by_username(username)
    if not user or not user.check_password(password):
        logger.warning("Failed login for %s", username)
        raise AuthenticationError("Invalid credentials")

    member = user.member
    if member is not None and not member.is_active:
        logger.warning("Login refused for inactive member %s", member.id)
        raise AuthenticationError("Member account is inactive")

    return user, member
