from flask import Blueprint, jsonify, url_for, current_app
from eduportal.data_service import FetchError
from eduportal.extensions import get_data_service
from eduportal.views import MATERIALS_TABLE

base_bp = Blueprint("base", __name__)

FEATURES = [
    {
        "key": "attendance",
        "title": "Attendance Tracking",
        "description": "Monitor your attendance records in real-time and stay on top of your academic requirements.",
    },
    {
        "key": "materials",
        "title": "Study Materials",
        "description": "Access all your course materials, notes, and resources in one centralized location.",
    },
    {
        "key": "portal",
        "title": "Student Portal",
        "description": "Personalized dashboard to manage your academic profile and track your progress.",
    },
]


@base_bp.route("/")
def home():
    return jsonify({
        "name": "EduPortal",
        "message": "Welcome to EduPortal",
        "tagline": (
            "Your comprehensive educational platform for tracking attendance, "
            "accessing study materials, and managing your academic journey."
        ),
        "features": FEATURES,
        "sign_in_url": url_for("auth.login"),
    })


@base_bp.route("/api/health")
def health():
    try:
        rows = get_data_service().select(MATERIALS_TABLE, columns="id")
        return {"status": "success", "study_materials": len(rows)}
    except FetchError as e:
        current_app.logger.error("Health check failed: %s", e)
        return {"status": "error", "message": str(e)}, 503
