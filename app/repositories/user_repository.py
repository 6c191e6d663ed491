"""
User Profile Repository.

Handles all profile data access via the service-role Supabase client.
Profiles live in the ``dd-users`` table (configurable) and reference the
auth identity through ``auth_user_id``.
"""

from __future__ import annotations

from typing import Optional

from app.database import DatabaseManager
from app.logger import StructuredLogger
from app.models.user import UserProfile
from app.repositories.base_repository import BaseRepository, Row


def _escape_like(value: str) -> str:
    """Escape the PostgREST LIKE wildcards so *value* matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class UserRepository(BaseRepository):
    """Data access layer for staff profiles.

    **No ``delete()`` method.**  Profiles are never hard-deleted; use
    :meth:`set_active` to revoke access while keeping the row that
    appointments, deliveries and financial entries point at.
    """

    TABLE = "dd-users"

    def __init__(
        self,
        db: DatabaseManager,
        logger: StructuredLogger,
        table: Optional[str] = None,
    ) -> None:
        super().__init__(db, logger)
        if table:
            self.TABLE = table

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_role(self, auth_user_id: str) -> Optional[str]:
        """Return the raw ``role`` of the profile linked to *auth_user_id*.

        Returns ``None`` when no profile row exists.  Query errors
        propagate to the caller.
        """
        response = (
            self.supabase.table(self.TABLE)
            .select("role")
            .eq("auth_user_id", auth_user_id)
            .maybe_single()
            .execute()
        )
        row = self._single_row(response)
        if row is None:
            return None
        role = row.get("role")
        return str(role) if role else None

    def get_by_auth_user_id(self, auth_user_id: str) -> Optional[UserProfile]:
        """Fetch the profile linked to an auth identity."""
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .eq("auth_user_id", auth_user_id)
            .maybe_single()
            .execute()
        )
        row = self._single_row(response)
        return UserProfile(**row) if row else None

    def get_by_id(self, profile_id: str) -> Optional[UserProfile]:
        """Fetch a profile by its own primary key."""
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .eq("id", profile_id)
            .maybe_single()
            .execute()
        )
        row = self._single_row(response)
        return UserProfile(**row) if row else None

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        """Fetch a profile by email address, ignoring case.

        Older rows keep the email as it was typed, so the match goes
        through ``ilike`` with the LIKE wildcards escaped.
        """
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .ilike("email", _escape_like(email.strip()))
            .limit(1)
            .execute()
        )
        row = self._single_row(response)
        return UserProfile(**row) if row else None

    def get_email_by_pseudo(self, pseudo: str) -> Optional[str]:
        """Resolve a display handle to the email of its profile."""
        response = (
            self.supabase.table(self.TABLE)
            .select("email")
            .eq("pseudo", pseudo.strip())
            .maybe_single()
            .execute()
        )
        row = self._single_row(response)
        if row is None:
            return None
        email = row.get("email")
        return str(email) if email else None

    def get_all(self) -> list[UserProfile]:
        """Fetch every profile, newest first."""
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return [UserProfile(**row) for row in self._rows(response)]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, row: Row) -> UserProfile:
        """Insert a profile row and return it as stored.

        Raises:
            ValueError: If the insert returned no representation.
        """
        response = self.supabase.table(self.TABLE).insert(row).execute()
        rows = self._rows(response)
        if not rows:
            raise ValueError(f"Insert into {self.TABLE} returned no row")
        created = UserProfile(**rows[0])
        self._logger.info("Profile created: %s", created.id)
        return created

    def update(self, profile_id: str, changes: Row) -> Optional[UserProfile]:
        """Apply *changes* to a profile. Returns ``None`` if no row matched."""
        response = (
            self.supabase.table(self.TABLE)
            .update(changes)
            .eq("id", profile_id)
            .execute()
        )
        rows = self._rows(response)
        return UserProfile(**rows[0]) if rows else None

    def set_active(self, profile_id: str, is_active: bool) -> Optional[UserProfile]:
        """Soft (de)activation, the only supported removal mechanism."""
        return self.update(profile_id, {"is_active": is_active})
