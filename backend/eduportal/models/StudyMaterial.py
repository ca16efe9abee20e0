from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from utils.serialization import to_dict as record_to_dict
from .base import parse_timestamp


@dataclass(frozen=True)
class StudyMaterial:
    __tablename__ = "study_materials"

    id: str
    title: str
    subject: str
    uploaded_at: datetime
    description: Optional[str] = None
    file_url: Optional[str] = None
    file_type: Optional[str] = None

    @classmethod
    def from_row(cls, row):
        return cls(
            id=str(row["id"]),
            title=row["title"],
            subject=row["subject"],
            uploaded_at=parse_timestamp(row["uploaded_at"]),
            description=row.get("description"),
            file_url=row.get("file_url"),
            file_type=row.get("file_type"),
        )

    @property
    def display_date(self):
        # e.g. "Oct 18, 2026"
        return f"{self.uploaded_at:%b} {self.uploaded_at.day}, {self.uploaded_at.year}"

    @property
    def downloadable(self):
        return bool(self.file_url)

    def to_dict(self):
        return {
            **record_to_dict(self),
            "description": self.description or None,
            "display_date": self.display_date,
            "download_url": self.file_url if self.downloadable else None,
        }
