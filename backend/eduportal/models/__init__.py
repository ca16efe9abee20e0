from .base import AttendanceStatus, BadgeVariant
from .AttendanceRecord import AttendanceRecord, StatusBadge, STATUS_BADGES
from .StudyMaterial import StudyMaterial
from .Profile import Profile
from .PortalSession import PortalSession
