"""
User and session data models.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from .base import WimsModel, generate_id, now_ms

DAY_MS = 24 * 60 * 60 * 1000


class UserRole(str, Enum):
    ADMIN = "admin"
    SALESMAN = "salesman"


class User(WimsModel):
    """A locally registered admin or salesman account."""

    id: str = Field(default_factory=lambda: generate_id("USR"))
    name: str = Field(..., min_length=1, max_length=100)
    email: str = ""
    phone: str = ""
    role: UserRole
    is_approved: bool = True

    @field_validator('is_approved', mode='before')
    @classmethod
    def default_approved(cls, v):
        """Records saved before approvals existed count as approved."""
        return True if v is None else v


class Session(WimsModel):
    """The currently authenticated user and when the session was issued."""

    user: User
    timestamp: int = Field(default_factory=now_ms)  # epoch milliseconds

    def age_ms(self, now: Optional[int] = None) -> int:
        return (now if now is not None else now_ms()) - self.timestamp

    def is_valid(self, max_age_days: int, now: Optional[int] = None) -> bool:
        """Check whether the session is younger than ``max_age_days``."""
        return self.age_ms(now) < max_age_days * DAY_MS
