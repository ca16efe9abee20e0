from .base_route import base_bp
from .auth import auth_bp
from .dashboard import dashboard_bp
from .attendance import attendance_bp
from .materials import materials_bp


def register_routes(app):
    app.register_blueprint(base_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(dashboard_bp, url_prefix="/dashboard")
    app.register_blueprint(attendance_bp, url_prefix="/attendance")
    app.register_blueprint(materials_bp, url_prefix="/materials")
