import enum
from dataclasses import dataclass, field
from typing import Callable, List

from eduportal.data_service import FetchError
from eduportal.models import AttendanceRecord, Profile, StudyMaterial

ATTENDANCE_TABLE = "attendance"
MATERIALS_TABLE = "study_materials"
PROFILES_TABLE = "profiles"
USER_ROLES_TABLE = "user_roles"


class ViewState(enum.Enum):
    loading = "loading"
    empty = "empty"
    populated = "populated"


@dataclass
class ListView:
    """A fetched collection rendered as loading, empty or populated.

    A view starts out ``loading``. Routes always call :meth:`load` before
    answering, so only callers that render a view ahead of its fetch see
    ``loading_description``.
    """

    title: str
    description: str
    loading_description: str
    empty_message: str
    state: ViewState = ViewState.loading
    items: List = field(default_factory=list)

    def load(self, fetch: Callable[[], list]):
        self.state = ViewState.loading
        self.items = list(fetch())
        self.state = ViewState.populated if self.items else ViewState.empty
        return self

    def to_dict(self):
        body = {
            "state": self.state.value,
            "title": self.title,
            "description": self.loading_description if self.state is ViewState.loading else self.description,
            "items": [item.to_dict() for item in self.items],
            "count": len(self.items),
        }
        if self.state is ViewState.empty:
            body["message"] = self.empty_message
        return body


def attendance_view():
    return ListView(
        title="Attendance Records",
        description="Your recent attendance history",
        loading_description="Loading your attendance history...",
        empty_message="No attendance records found",
    )


def materials_view():
    return ListView(
        title="Study Materials",
        description="Access your course materials and resources",
        loading_description="Loading available resources...",
        empty_message="No study materials available yet",
    )


def fetch_attendance(service, session, limit=10, logger=None):
    """Most recent attendance for ``session``'s user, newest first.

    A missing session or a failed read both give an empty list.
    """
    if session is None:
        return []
    try:
        rows = service.select(
            ATTENDANCE_TABLE,
            filters={"student_id": session.user_id},
            order_by="date",
            descending=True,
            limit=limit,
            session=session,
        )
    except FetchError as e:
        if logger is not None:
            logger.error("Error fetching attendance: %s", e)
        return []
    return _parse_rows(rows, AttendanceRecord, logger)


def fetch_materials(service, session=None, logger=None):
    try:
        rows = service.select(
            MATERIALS_TABLE,
            order_by="uploaded_at",
            descending=True,
            session=session,
        )
    except FetchError as e:
        if logger is not None:
            logger.error("Error fetching study materials: %s", e)
        return []
    return _parse_rows(rows, StudyMaterial, logger)


def _parse_rows(rows, record_cls, logger):
    records = []
    for row in rows:
        try:
            records.append(record_cls.from_row(row))
        except (KeyError, ValueError, TypeError) as e:
            if logger is not None:
                logger.warning("Skipping malformed %s row %r: %s", record_cls.__tablename__, row.get("id"), e)
    return records


def fetch_profile(service, session):
    """Profile row for ``session``; raises FetchError when absent."""
    row = service.select_one(PROFILES_TABLE, {"id": session.user_id}, session=session)
    if row is None:
        raise FetchError(f"{PROFILES_TABLE}: no row for {session.user_id}")
    return Profile.from_row(row)


def is_admin(service, session, logger=None):
    if session is None:
        return False
    try:
        row = service.select_one(
            USER_ROLES_TABLE,
            {"user_id": session.user_id, "role": "admin"},
            columns="role",
            session=session,
        )
    except FetchError as e:
        if logger is not None:
            logger.error("Error checking admin role: %s", e)
        return False
    return row is not None
