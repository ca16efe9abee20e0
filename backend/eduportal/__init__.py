from flask import Flask, jsonify, redirect, url_for
from .config import Config
from eduportal.routes import register_routes
from eduportal.extensions import blocklist, cors, init_data_service, jwt, limiter
from eduportal.materials import VALIDATION_MESSAGES, ValidationKind


def create_app(config_object=None, client_factory=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    init_data_service(app, client_factory=client_factory)
    jwt.init_app(app)
    cors.init_app(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)
    limiter.init_app(app)
    blocklist.init_app(app)
    register_routes(app)

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return jwt_payload["jti"] in blocklist

    # Every rejected session cookie lands on the sign-in entry point
    @jwt.unauthorized_loader
    def missing_token(reason):
        return redirect(url_for("auth.login"))

    @jwt.invalid_token_loader
    def invalid_token(reason):
        app.logger.info("Rejected session cookie: %s", reason)
        return redirect(url_for("auth.login"))

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return redirect(url_for("auth.login"))

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return redirect(url_for("auth.login"))

    @app.errorhandler(413)
    def request_too_large(error):
        return jsonify({
            "error": VALIDATION_MESSAGES[ValidationKind.TOO_LARGE],
            "kind": ValidationKind.TOO_LARGE.value,
        }), 413

    return app
