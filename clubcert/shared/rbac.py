from functools import wraps

from flask import jsonify, session

from ..app import db
from ..models import User


def _current_user() -> User | None:
    user_id = session.get("user_id")
    if not user_id:
        return None
    return db.session.get(User, user_id)


def login_required(fn):
    """Require an identity established by the auth layer in the session."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = _current_user()
        if not user:
            return jsonify({"success": False, "message": "Authentication required"}), 401
        return fn(*args, **kwargs, current_user=user)

    return wrapper


def staff_required(fn):
    """Allow event organizers (EO) and super admins."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = _current_user()
        if not user:
            return jsonify({"success": False, "message": "Authentication required"}), 401
        if not user.is_staff:
            return jsonify({"success": False, "message": "Forbidden"}), 403
        return fn(*args, **kwargs, current_user=user)

    return wrapper
