"""Study material submission.

A submission is validated completely before anything touches the
network, then runs three remote steps in order: upload the PDF to the
storage bucket, resolve its public URL, insert the metadata row. Each
step only starts once the previous one succeeded and nothing is retried.

Upload and insert are not transactional. When the insert fails the blob
stays in the bucket unreferenced (an orphan) unless the app is configured
with ``RECONCILE_ORPHANED_UPLOADS``.
"""
import enum
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import magic
from werkzeug.utils import secure_filename

from eduportal.data_service import DataServiceError, StorageError, WriteError
from eduportal.models import StudyMaterial

PDF_MEDIA_TYPE = "application/pdf"
MAX_MATERIAL_BYTES = 10485760
MATERIALS_TABLE = "study_materials"
MATERIALS_BUCKET = "study-materials"

SUCCESS_MESSAGE = "Study material uploaded successfully!"
FAILURE_MESSAGE = "Failed to upload study material"


class ValidationKind(enum.Enum):
    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    MISSING_FIELD = "missing_field"


VALIDATION_MESSAGES = {
    ValidationKind.UNSUPPORTED_TYPE: "Please select a PDF file",
    ValidationKind.TOO_LARGE: "File size must be less than 10MB",
    ValidationKind.MISSING_FIELD: "Please fill in all required fields",
}


class ValidationError(Exception):
    def __init__(self, kind, detail=None):
        self.kind = kind
        self.detail = detail
        super().__init__(VALIDATION_MESSAGES[kind])

    @property
    def message(self):
        return VALIDATION_MESSAGES[self.kind]


class SubmissionError(Exception):
    message = FAILURE_MESSAGE


class UploadError(SubmissionError):
    pass


class MetadataInsertError(SubmissionError):
    def __init__(self, msg, storage_key, file_url, orphaned=True):
        super().__init__(msg)
        self.storage_key = storage_key
        self.file_url = file_url
        self.orphaned = orphaned


@dataclass
class CandidateFile:
    filename: str
    media_type: str
    size: int
    stream: object = field(repr=False)

    @classmethod
    def from_upload(cls, upload):
        """Build from a werkzeug ``FileStorage``."""
        stream = upload.stream
        start = stream.tell()
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(start)
        return cls(
            filename=upload.filename or "",
            media_type=upload.mimetype or "",
            size=size,
            stream=stream,
        )

    def head(self, size=2048):
        start = self.stream.tell()
        try:
            self.stream.seek(0)
            return self.stream.read(size) or b""
        finally:
            self.stream.seek(start)

    def read(self):
        self.stream.seek(0)
        return self.stream.read()

    @property
    def extension(self):
        name = secure_filename(self.filename)
        if "." in name:
            ext = name.rsplit(".", 1)[1].lower()
            if ext:
                return ext
        return "pdf"


@dataclass
class MaterialForm:
    title: str = ""
    subject: str = ""
    description: str = ""
    file: Optional[CandidateFile] = None

    @classmethod
    def from_request(cls, form, files):
        upload = files.get("file")
        candidate = None
        if upload is not None and upload.filename:
            candidate = CandidateFile.from_upload(upload)
        return cls(
            title=(form.get("title") or "").strip(),
            subject=(form.get("subject") or "").strip(),
            description=(form.get("description") or "").strip(),
            file=candidate,
        )

    def clear(self):
        self.title = ""
        self.subject = ""
        self.description = ""
        self.file = None

    def to_dict(self):
        return {
            "title": self.title,
            "subject": self.subject,
            "description": self.description,
            "file": self.file.filename if self.file else None,
        }


def validate_file(candidate, max_bytes=MAX_MATERIAL_BYTES):
    if candidate.media_type != PDF_MEDIA_TYPE:
        raise ValidationError(ValidationKind.UNSUPPORTED_TYPE, candidate.media_type)
    if candidate.size > max_bytes:
        raise ValidationError(ValidationKind.TOO_LARGE, candidate.size)
    sniffed = magic.from_buffer(candidate.head(), mime=True)
    if sniffed != PDF_MEDIA_TYPE:
        raise ValidationError(ValidationKind.UNSUPPORTED_TYPE, sniffed)


def validate_form(form, max_bytes=MAX_MATERIAL_BYTES):
    """Raise ValidationError for the first problem with ``form``."""
    if form.file is not None:
        validate_file(form.file, max_bytes=max_bytes)
    missing = [name for name in ("title", "subject") if not getattr(form, name)]
    if form.file is None:
        missing.append("file")
    if missing:
        raise ValidationError(ValidationKind.MISSING_FIELD, ", ".join(missing))


def generate_storage_key(candidate):
    return f"{uuid.uuid4().hex}.{candidate.extension}"


def submit_study_material(service, form, session=None, bucket=MATERIALS_BUCKET,
                          max_bytes=MAX_MATERIAL_BYTES, reconcile_orphans=False,
                          logger=None):
    """Validate ``form``, store its PDF and register it as a study material.

    Returns the created :class:`StudyMaterial` and clears ``form``.
    Raises ValidationError before any network call, UploadError when the
    blob could not be stored, MetadataInsertError when the row could not
    be written after a successful upload.
    """
    validate_form(form, max_bytes=max_bytes)

    candidate = form.file
    storage_key = generate_storage_key(candidate)

    try:
        service.upload(bucket, storage_key, candidate.read(), PDF_MEDIA_TYPE, session=session)
    except StorageError as e:
        raise UploadError(str(e)) from e

    file_url = service.public_url(bucket, storage_key)

    row = {
        "title": form.title,
        "description": form.description or None,
        "subject": form.subject,
        "file_url": file_url,
        "file_type": "pdf",
    }
    try:
        inserted = service.insert(MATERIALS_TABLE, row, session=session)
    except WriteError as e:
        orphaned = True
        if reconcile_orphans:
            try:
                service.remove(bucket, [storage_key], session=session)
                orphaned = False
            except DataServiceError as cleanup_error:
                if logger is not None:
                    logger.error("Could not remove %s after failed insert: %s", storage_key, cleanup_error)
        if orphaned and logger is not None:
            logger.warning("Orphaned upload %s/%s: metadata insert failed", bucket, storage_key)
        raise MetadataInsertError(str(e), storage_key, file_url, orphaned=orphaned) from e

    inserted.setdefault("id", "")
    inserted.setdefault("uploaded_at", datetime.now(timezone.utc).isoformat())
    material = StudyMaterial.from_row({**row, **inserted})
    form.clear()
    return material


def find_orphaned_uploads(service, bucket=MATERIALS_BUCKET):
    """Bucket keys whose public URL no study material row points at."""
    rows = service.select(MATERIALS_TABLE, columns="file_url")
    referenced = {row["file_url"] for row in rows if row.get("file_url")}
    return [key for key in service.list_objects(bucket) if service.public_url(bucket, key) not in referenced]
