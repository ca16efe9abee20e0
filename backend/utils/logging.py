from flask import request, jsonify, current_app
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from utils.audit import log_event


def log_rate_limit_violation(request_limit):
    try:
        verify_jwt_in_request(optional=True)
        user_id = get_jwt_identity()
    except (JWTExtendedException, PyJWTError):
        user_id = None

    log_event(
        "RATE_LIMIT_EXCEEDED",
        user_id=user_id,
        ip=request.remote_addr,
        description=f"{request.method} {request.path} ({request_limit.limit})",
        level="WARNING",
    )
    current_app.logger.warning("Rate limit exceeded: %s %s", request.method, request.path)

    response = jsonify({
        "error": "Rate limit exceeded. Please slow down."
    })
    response.status_code = 429
    return response
