"""
User Profile Model.

Pydantic model for a row of the ``dd-users`` profile table.  The profile
is the application-level record of a staff member and is distinct from
the auth provider's identity record, which it references through
``auth_user_id``.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class UserProfile(BaseModel):
    """Represents a staff profile.

    ``role`` is kept as a plain string: rows written by older forms may
    hold values outside :class:`~app.models.enums.UserRole`, and the role
    checks compare case-insensitively anyway.

    ``auth_user_id`` is ``None`` for profiles created ahead of signup.
    """

    id: str
    auth_user_id: Optional[str] = None
    email: str
    pseudo: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    salary: Optional[Decimal] = None
    hire_date: Optional[date] = None
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "extra": "ignore"}

    @property
    def full_name(self) -> str:
        """First and last name joined, falling back to the pseudo or email."""
        parts = [p for p in (self.first_name, self.last_name) if p]
        if parts:
            return " ".join(parts)
        return self.pseudo or self.email

    @property
    def status_label(self) -> str:
        """``Pending Signup`` / ``Active`` / ``Inactive`` as shown in the user list."""
        if not self.auth_user_id:
            return "Pending Signup"
        return "Active" if self.is_active else "Inactive"
