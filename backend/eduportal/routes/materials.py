from flask import Blueprint, request, jsonify, current_app
from eduportal.extensions import get_data_service
from eduportal.materials import (
    MaterialForm, MetadataInsertError, SUCCESS_MESSAGE, UploadError, ValidationError,
    submit_study_material,
)
from eduportal.views import fetch_materials, materials_view
from utils.audit import log_event
from utils.decorators import admin_required, session_required

materials_bp = Blueprint('materials', __name__)


@materials_bp.route('/', methods=['GET'])
@session_required()
def list_materials(session):
    view = materials_view().load(
        lambda: fetch_materials(get_data_service(), session, logger=current_app.logger)
    )
    return jsonify(view.to_dict()), 200


@materials_bp.route('/', methods=['POST'])
@session_required()
@admin_required()
def upload_material(session):
    form = MaterialForm.from_request(request.form, request.files)
    ip = request.remote_addr

    try:
        material = submit_study_material(
            get_data_service(),
            form,
            session=session,
            bucket=current_app.config["STUDY_MATERIALS_BUCKET"],
            max_bytes=current_app.config["MAX_MATERIAL_BYTES"],
            reconcile_orphans=current_app.config["RECONCILE_ORPHANED_UPLOADS"],
            logger=current_app.logger,
        )
    except ValidationError as e:
        return jsonify({
            "error": e.message,
            "kind": e.kind.value,
            "form": form.to_dict(),
        }), 400
    except UploadError as e:
        current_app.logger.error("Upload error: %s", e)
        log_event("MATERIAL_UPLOAD_FAILED", user_id=session.user_id, ip=ip, description=str(e), level="ERROR")
        return jsonify({"error": e.message, "form": form.to_dict()}), 502
    except MetadataInsertError as e:
        current_app.logger.error("Upload error: %s", e)
        event = "MATERIAL_ORPHANED_UPLOAD" if e.orphaned else "MATERIAL_INSERT_FAILED"
        log_event(event, user_id=session.user_id, ip=ip, description=f"{e.storage_key}: {e}", level="ERROR")
        return jsonify({"error": e.message, "form": form.to_dict()}), 502

    log_event(
        "MATERIAL_UPLOADED",
        user_id=session.user_id,
        ip=ip,
        description=f"{material.title} ({material.subject}) -> {material.file_url}",
    )
    return jsonify({
        "message": SUCCESS_MESSAGE,
        "material": material.to_dict(),
        "form": form.to_dict(),
    }), 201
