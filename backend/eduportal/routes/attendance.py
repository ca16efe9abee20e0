from flask import Blueprint, jsonify, current_app
from eduportal.extensions import get_data_service
from eduportal.views import attendance_view, fetch_attendance
from utils.decorators import session_required

attendance_bp = Blueprint('attendance', __name__)


@attendance_bp.route('/', methods=['GET'])
@session_required()
def list_attendance(session):
    view = attendance_view().load(
        lambda: fetch_attendance(
            get_data_service(),
            session,
            limit=current_app.config["ATTENDANCE_HISTORY_LIMIT"],
            logger=current_app.logger,
        )
    )
    return jsonify(view.to_dict()), 200
