from functools import wraps
from flask import jsonify, redirect, url_for, current_app
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from eduportal.extensions import get_data_service
from eduportal.views import is_admin


def _redirect_to_login():
    return redirect(url_for("auth.login"))


def session_required():
    """
    Only lets requests through when they carry a live hosted-auth session.
    The cookie JWT is checked by flask-jwt-extended (missing, invalid,
    expired and revoked tokens all redirect to sign-in), then the Supabase
    tokens it carries must still be accepted remotely. The resolved
    PortalSession is passed to the view as ``session``.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt()

            session = get_data_service().get_session(
                claims.get("sb_access_token"), claims.get("sb_refresh_token")
            )
            if session is None:
                return _redirect_to_login()

            kwargs["session"] = session
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def admin_required():
    """
    Restrict a session-gated view to users holding the admin role.
    Usage: @session_required() then @admin_required()
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            session = kwargs.get("session")
            if session is None:
                return _redirect_to_login()

            if not is_admin(get_data_service(), session, logger=current_app.logger):
                return jsonify({"error": "Access forbidden: insufficient permissions"}), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
