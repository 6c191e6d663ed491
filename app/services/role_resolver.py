"""
Role Resolver.

Answers "what may this user do?" by reading the ``role`` column of the
caller's profile row.  One profile read per call, no caching.

Both checks collapse every failure mode (no id, query error, no row,
unknown role) into the same negative answer.  Callers therefore cannot
tell *denied* apart from *lookup failed*; errors are logged here so
they are not lost.
"""

from __future__ import annotations

from typing import Optional

from app.config import AppConfig
from app.logger import StructuredLogger
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService


class RoleResolver(BaseService):
    """Classifies auth identities as admin-tier or not."""

    def __init__(
        self,
        repo: UserRepository,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._repo = repo
        self._config = config

    def get_user_role(self, user_id: Optional[str]) -> Optional[str]:
        """Raw role string of the profile linked to *user_id*.

        ``None`` when *user_id* is empty, the query fails or no profile
        row exists.
        """
        if not user_id:
            return None
        try:
            return self._repo.get_role(user_id)
        except Exception as exc:
            self._logger.error("Role lookup failed for %s: %s", user_id, exc)
            return None

    def is_admin(self, user_id: Optional[str]) -> bool:
        """``True`` iff the profile role, case-insensitively, is admin-tier."""
        return self._config.is_admin_role(self.get_user_role(user_id))

    def is_user_manager(self, user_id: Optional[str]) -> bool:
        """``True`` iff the profile role may open user management."""
        return self._config.is_user_manager_role(self.get_user_role(user_id))
