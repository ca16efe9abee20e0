from datetime import datetime, timezone
from flask import Blueprint, request, jsonify, current_app, make_response, url_for
from flask_jwt_extended import create_access_token, get_jwt, set_access_cookies, unset_jwt_cookies
from eduportal.data_service import AuthError
from eduportal.extensions import blocklist, get_data_service, limiter
from utils.audit import log_event
from utils.decorators import session_required
import re

auth_bp = Blueprint('auth', __name__)
EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


@auth_bp.route('/login', methods=['GET'])
def login():
    return jsonify({
        "message": "Please sign in to continue",
        "login_url": url_for("auth.login_submit"),
    }), 200


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("5 per minute", override_defaults=False)
def login_submit():
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''
    ip = request.remote_addr

    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    if not EMAIL_RE.match(email):
        return jsonify({"error": "Invalid email format"}), 400

    try:
        session = get_data_service().sign_in(email, password)
    except AuthError as e:
        current_app.logger.info("Sign-in failed for %s: %s", email, e)
        log_event("LOGIN_FAILED", ip=ip, description=f"Failed login attempt for {email}")
        return jsonify({"error": "Invalid email or password"}), 401

    expires = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    access_token = create_access_token(
        identity=session.user_id,
        additional_claims={
            "email": session.email,
            "sb_access_token": session.access_token,
            "sb_refresh_token": session.refresh_token,
        }
    )

    response = make_response(jsonify({"message": "Login successful", "user_id": session.user_id}))
    set_access_cookies(response, access_token, max_age=int(expires.total_seconds()))

    log_event("LOGIN_SUCCESS", user_id=session.user_id, ip=ip, description=f"{email} logged in")
    return response


@auth_bp.route('/me', methods=['GET'])
@session_required()
def get_current_user(session):
    return jsonify({
        "id": session.user_id,
        "email": session.email,
    }), 200


@auth_bp.route("/logout", methods=["POST"])
@session_required()
def logout(session):
    claims = get_jwt()
    expires_in = claims["exp"] - datetime.now(timezone.utc).timestamp()
    blocklist.add(claims["jti"], expires_in)

    try:
        get_data_service().sign_out(session)
    except AuthError as e:
        current_app.logger.warning("Remote sign-out failed for %s: %s", session.user_id, e)

    response = make_response(jsonify({"message": "Logged out successfully"}))
    unset_jwt_cookies(response)

    log_event("LOGOUT", user_id=session.user_id, ip=request.remote_addr)
    return response
