from dataclasses import dataclass
from datetime import date
from typing import Optional

from utils.serialization import to_dict as record_to_dict
from .base import AttendanceStatus, BadgeVariant, ordinal, parse_date


@dataclass(frozen=True)
class StatusBadge:
    icon: str
    color: str
    variant: BadgeVariant


# One entry per status; a missing key is a programming error.
STATUS_BADGES = {
    AttendanceStatus.present: StatusBadge("check-circle", "green", BadgeVariant.default),
    AttendanceStatus.absent: StatusBadge("x-circle", "red", BadgeVariant.destructive),
    AttendanceStatus.late: StatusBadge("clock", "amber", BadgeVariant.secondary),
}


@dataclass(frozen=True)
class AttendanceRecord:
    __tablename__ = "attendance"

    id: str
    date: date
    status: AttendanceStatus
    subject: str
    notes: Optional[str] = None

    @classmethod
    def from_row(cls, row):
        return cls(
            id=str(row["id"]),
            date=parse_date(row["date"]),
            status=AttendanceStatus(row["status"]),
            subject=row.get("subject") or "",
            notes=row.get("notes"),
        )

    @property
    def badge(self):
        return STATUS_BADGES[self.status]

    @property
    def display_date(self):
        # e.g. "October 18th, 2026"
        return f"{self.date:%B} {ordinal(self.date.day)}, {self.date.year}"

    def to_dict(self):
        badge = self.badge
        return {
            **record_to_dict(self),
            "display_date": self.display_date,
            "label": self.status.value.capitalize(),
            "icon": badge.icon,
            "color": badge.color,
            "badge_variant": badge.variant.value,
        }
