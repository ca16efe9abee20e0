from dataclasses import dataclass
from utils.serialization import to_dict as record_to_dict


@dataclass(frozen=True)
class Profile:
    __tablename__ = "profiles"

    id: str
    full_name: str
    student_id: str
    email: str

    @classmethod
    def from_row(cls, row):
        return cls(
            id=str(row["id"]),
            full_name=row.get("full_name") or "",
            student_id=row.get("student_id") or "",
            email=row.get("email") or "",
        )

    @property
    def initials(self):
        return "".join(part[0] for part in self.full_name.split(" ") if part)

    def to_dict(self):
        return {**record_to_dict(self), "initials": self.initials}
