from flask import Blueprint, jsonify, current_app
from eduportal.data_service import FetchError
from eduportal.extensions import get_data_service
from eduportal.views import (
    attendance_view, materials_view, fetch_attendance, fetch_materials, fetch_profile, is_admin
)
from utils.decorators import session_required

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/')
@session_required()
def summary(session):
    service = get_data_service()
    logger = current_app.logger

    profile = None
    profile_error = None
    try:
        profile = fetch_profile(service, session)
    except FetchError as e:
        logger.error("Error loading profile for %s: %s", session.user_id, e)
        profile_error = "Error loading profile"

    attendance = attendance_view().load(
        lambda: fetch_attendance(
            service, session, limit=current_app.config["ATTENDANCE_HISTORY_LIMIT"], logger=logger
        )
    )
    materials = materials_view().load(lambda: fetch_materials(service, session, logger=logger))

    return jsonify({
        "profile": profile.to_dict() if profile else None,
        "profile_error": profile_error,
        "is_admin": is_admin(service, session, logger=logger),
        "welcome": "Welcome back!",
        "stats": {
            "totalAttendance": len(attendance.items),
            "studyMaterials": len(materials.items),
            "profileStatus": "Active",
            "email": profile.email if profile else session.email,
        },
        "attendance": attendance.to_dict(),
        "materials": materials.to_dict(),
    })
