from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PortalSession:
    """An authenticated visitor as seen by the hosted auth service.

    Views and the submission workflow take one of these as an argument
    instead of looking the current user up from request globals.
    """

    user_id: str
    access_token: str = field(repr=False)
    email: Optional[str] = None
    refresh_token: Optional[str] = field(default=None, repr=False)
