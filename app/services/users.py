"""
User Management Service.

Handles administrative profile operations: listing and searching staff,
activating / deactivating accounts and changing roles.  Also resolves
the profile behind a verified auth identity for the HTTP layer.

Rules:
    - Only user-manager roles (admin, superadmin) may use these operations.
    - Nobody modifies their own profile through them.
    - ``superadmin`` and ``admin`` profiles can only be modified by a
      superadmin, and only a superadmin may grant either role.
    - Profiles are never deleted; deactivation is the removal mechanism.
"""

from __future__ import annotations

from typing import Optional

from app.auth import CurrentUser
from app.logger import StructuredLogger
from app.models.enums import UserRole
from app.models.service_models import ServiceResult
from app.models.user import UserProfile
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService
from app.utils.audit import log_audit_event
from app.utils.general import convert_to_json_safe

_PRIVILEGED_ROLES: frozenset[str] = frozenset({UserRole.ADMIN, UserRole.SUPERADMIN})


def _profile_to_dict(profile: UserProfile) -> dict[str, object]:
    data = convert_to_json_safe(profile.model_dump())
    data["full_name"] = profile.full_name
    data["status"] = profile.status_label
    return data


def _matches(profile: UserProfile, term: str) -> bool:
    haystack = (
        profile.first_name,
        profile.last_name,
        profile.email,
        profile.pseudo,
        profile.phone,
    )
    return any(term in value.lower() for value in haystack if value)


class UserService(BaseService):
    """Service layer for admin user management operations."""

    def __init__(
        self,
        repo: UserRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._repo = repo

    # ------------------------------------------------------------------
    # Caller resolution
    # ------------------------------------------------------------------

    def get_profile_for_identity(self, auth_user_id: str) -> ServiceResult[UserProfile]:
        """Profile linked to a verified identity.

        An identity without a profile is answered with 401: it counts as
        not logged in.  A deactivated profile gets 403.
        """
        try:
            profile = self._repo.get_by_auth_user_id(auth_user_id)
        except RuntimeError as exc:
            self._logger.warning("Database unavailable: %s", exc)
            return ServiceResult(
                success=False, error="Database is not configured.", status_code=503,
            )
        except Exception as exc:
            self._logger.error("Profile lookup failed for %s: %s", auth_user_id, exc)
            return ServiceResult(
                success=False,
                error="Could not verify your account. Please try again later.",
                status_code=503,
            )

        if profile is None:
            self._logger.warning(
                "Identity %s has no profile; treating as signed out.", auth_user_id,
            )
            return ServiceResult(
                success=False,
                error="No staff profile is linked to this account.",
                status_code=401,
            )
        if not profile.is_active:
            return ServiceResult(
                success=False,
                error="Your account has been deactivated. Contact your administrator.",
                status_code=403,
            )
        return ServiceResult(success=True, data=profile)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def get_all_users(
        self,
        current_user: CurrentUser,
        search: Optional[str] = None,
    ) -> ServiceResult[list]:
        """
        Fetch all profiles for the user management page, newest first.

        ``search`` is matched case-insensitively against first name,
        last name, email, pseudo and phone.
        """
        if not current_user.is_user_manager:
            return self._forbidden("Only admin users can manage users.")

        try:
            users: list[UserProfile] = self._repo.get_all()
        except Exception as exc:
            self._logger.error("Failed to fetch users: %s", exc)
            return ServiceResult(
                success=False,
                error=f"Database error fetching users: {exc}",
                status_code=500,
            )

        term = (search or "").strip().lower()
        if term:
            users = [user for user in users if _matches(user, term)]
        return ServiceResult(success=True, data=[_profile_to_dict(u) for u in users])

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def set_user_active(
        self,
        profile_id: str,
        is_active: bool,
        current_user: CurrentUser,
    ) -> ServiceResult[dict]:
        """Activate or deactivate a profile (soft removal)."""
        target, denied = self._load_modifiable(profile_id, current_user)
        if denied is not None:
            return denied

        try:
            updated = self._repo.set_active(profile_id, is_active)
        except Exception as exc:
            self._logger.error("set_active failed for %s: %s", profile_id, exc)
            return ServiceResult(
                success=False,
                error=f"Could not update user status: {exc}",
                status_code=500,
            )
        if updated is None:
            return ServiceResult(success=False, error="User not found.", status_code=404)

        log_audit_event(
            logger=self._logger,
            action="ACTIVATE_USER" if is_active else "DEACTIVATE_USER",
            entity_type="UserProfile",
            entity_id=profile_id,
            user_id=current_user.profile_id,
            details={"was_active": target.is_active, "is_active": is_active},
        )
        return ServiceResult(success=True, data=_profile_to_dict(updated))

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    def update_user_role(
        self,
        profile_id: str,
        new_role: str,
        current_user: CurrentUser,
    ) -> ServiceResult[dict]:
        """
        Change a profile's role.

        Args:
            profile_id: Primary key of the target profile.
            new_role: One of the ``UserRole`` values, any case.
            current_user: The authenticated manager performing the change.
        """
        try:
            validated_role = UserRole(new_role.strip().lower())
        except ValueError:
            return ServiceResult(
                success=False,
                error=f"Invalid role specified: '{new_role}'. "
                      f"Must be one of: {', '.join(r.value for r in UserRole)}.",
                status_code=400,
            )

        target, denied = self._load_modifiable(profile_id, current_user)
        if denied is not None:
            return denied

        if validated_role in _PRIVILEGED_ROLES and not current_user.is_superadmin:
            return self._forbidden(f"Only a superadmin can grant the {validated_role} role.")

        old_role = target.role or ""
        try:
            updated = self._repo.update(profile_id, {"role": validated_role.value})
        except Exception as exc:
            self._logger.error("Role update failed for %s: %s", profile_id, exc)
            return ServiceResult(
                success=False,
                error=f"Could not update role: {exc}",
                status_code=500,
            )
        if updated is None:
            return ServiceResult(success=False, error="User not found.", status_code=404)

        log_audit_event(
            logger=self._logger,
            action="UPDATE_ROLE",
            entity_type="UserProfile",
            entity_id=profile_id,
            user_id=current_user.profile_id,
            details={"old_role": old_role, "new_role": validated_role.value},
        )
        return ServiceResult(success=True, data=_profile_to_dict(updated))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _load_modifiable(
        self,
        profile_id: str,
        current_user: CurrentUser,
    ) -> tuple[Optional[UserProfile], Optional[ServiceResult]]:
        """Fetch *profile_id* and check *current_user* may modify it."""
        if not current_user.is_user_manager:
            return None, self._forbidden("Only admin users can manage users.")
        if profile_id == current_user.profile_id:
            return None, self._forbidden("You cannot modify your own account.")

        try:
            target = self._repo.get_by_id(profile_id)
        except Exception as exc:
            self._logger.error("Profile lookup failed for %s: %s", profile_id, exc)
            return None, ServiceResult(
                success=False,
                error=f"Database error fetching user: {exc}",
                status_code=500,
            )
        if target is None:
            return None, ServiceResult(
                success=False, error="User not found.", status_code=404,
            )

        target_role = (target.role or "").strip().lower()
        if target_role in _PRIVILEGED_ROLES and not current_user.is_superadmin:
            return None, self._forbidden(
                f"Only a superadmin can modify {target_role} users.",
            )
        return target, None

    @staticmethod
    def _forbidden(message: str) -> ServiceResult:
        return ServiceResult(success=False, error=message, status_code=403)
