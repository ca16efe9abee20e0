from datetime import date, datetime
import enum


class AttendanceStatus(enum.Enum):
    present = "present"
    absent = "absent"
    late = "late"


class BadgeVariant(enum.Enum):
    default = "default"
    destructive = "destructive"
    secondary = "secondary"


def parse_date(value):
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_timestamp(value):
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def ordinal(day):
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"
