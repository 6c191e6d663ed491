"""
Authenticated Caller State.

Provides the ``CurrentUser`` model that the HTTP layer builds once per
request from the bearer token.  There is no process-wide session: every
request resolves its own caller, so nothing here is shared between
requests.

Usage::

    from app.auth import CurrentUser

    user = CurrentUser(
        auth_user_id="abc-123",
        email="user@example.com",
        access_token="eyJ...",
        profile=profile,
    )
    if user.is_admin:
        ...
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from app.config import AppConfig
from app.models.user import UserProfile


class CurrentUser(BaseModel):
    """The caller of the current request.

    ``profile`` is always present: an auth identity without a profile row
    is treated as not logged in and never becomes a ``CurrentUser``.
    """

    auth_user_id: str
    email: Optional[str] = None
    access_token: str
    profile: UserProfile

    @property
    def profile_id(self) -> str:
        return self.profile.id

    @property
    def role(self) -> Optional[str]:
        return self.profile.role

    @property
    def normalized_role(self) -> str:
        return (self.profile.role or "").strip().lower()

    @property
    def is_admin(self) -> bool:
        """``True`` for the admin tier (admin, superadmin, manager)."""
        return AppConfig.is_admin_role(self.profile.role)

    @property
    def is_user_manager(self) -> bool:
        """``True`` for roles allowed to open user management."""
        return AppConfig.is_user_manager_role(self.profile.role)

    @property
    def is_superadmin(self) -> bool:
        return self.normalized_role == "superadmin"
