"""
Admin User Provisioning Service.

Creates a staff account in two steps against the provider:

1. an auth identity through the GoTrue admin API (email pre-confirmed);
2. the matching ``dd-users`` profile row.

There is no transaction spanning both.  If step 2 fails, the identity
from step 1 is deleted again on a best-effort basis.  A failed delete
leaves an orphaned identity; that case is logged at error level and
written to the audit trail, nothing reconciles it automatically.

The duplicate-email check is a plain read before the writes, so two
concurrent requests for the same email can both pass it.
"""

from __future__ import annotations

from typing import Optional

from app.database import DatabaseManager
from app.logger import StructuredLogger
from app.models.enums import UserRole
from app.models.service_models import ProvisionUserRequest, ServiceResult
from app.models.user import UserProfile
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService
from app.utils.audit import log_audit_event
from app.utils.general import convert_to_json_safe

SUCCESS_MESSAGE: str = "User created successfully!"
DUPLICATE_EMAIL_MESSAGE: str = "User with this email already exists in the system"
INTERNAL_ERROR_MESSAGE: str = "Internal server error"


class ProvisioningService(BaseService):
    """Service behind ``POST /api/admin/create-user``."""

    def __init__(
        self,
        repo: UserRepository,
        db: DatabaseManager,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._repo = repo
        self._db = db

    def create_user(self, request: ProvisionUserRequest) -> ServiceResult[dict]:
        """Provision an identity plus its profile.

        Returns:
            200 ``{success, user, message}`` on success; 400 for a
            duplicate email, an invalid role or a provider rejection;
            500 for anything unexpected.
        """
        if not self._db.is_online:
            return ServiceResult(
                success=False,
                error="Database is not configured.",
                status_code=503,
            )
        try:
            return self._create_user(request)
        except Exception as exc:
            self._logger.error(
                "Error creating user %s: %s", request.email, exc, exc_info=True,
            )
            return ServiceResult(
                success=False, error=INTERNAL_ERROR_MESSAGE, status_code=500,
            )

    # ------------------------------------------------------------------
    # Private implementation
    # ------------------------------------------------------------------

    def _create_user(self, request: ProvisionUserRequest) -> ServiceResult[dict]:
        email = request.email.strip().lower()

        role = self._normalize_role(request.role)
        if role is None:
            return ServiceResult(
                success=False,
                error=(
                    f"Invalid role specified: '{request.role}'. "
                    f"Must be one of: {', '.join(r.value for r in UserRole)}."
                ),
                status_code=400,
            )

        # --- 1. Duplicate pre-check ---
        if self._email_taken(email):
            return ServiceResult(
                success=False, error=DUPLICATE_EMAIL_MESSAGE, status_code=400,
            )

        # --- 2. Auth identity ---
        try:
            auth_response = self._db.supabase.auth.admin.create_user({
                "email": email,
                "password": request.password,
                "email_confirm": True,
            })
            auth_user_id = str(auth_response.user.id)
        except Exception as exc:
            self._logger.warning("Auth user creation failed for %s: %s", email, exc)
            return ServiceResult(
                success=False,
                error=f"Failed to create auth user: {exc}",
                status_code=400,
            )

        # --- 3. Profile row ---
        row = {
            "auth_user_id": auth_user_id,
            "email": email,
            "pseudo": request.pseudo,
            "first_name": request.first_name,
            "last_name": request.last_name,
            "phone": request.phone or None,
            "role": role,
            "salary": 0,
            "hire_date": None,
            "created_by": request.created_by or None,
            "is_active": True,
        }
        try:
            profile: UserProfile = self._repo.create(row)
        except Exception as exc:
            self._logger.warning(
                "Profile insert failed for %s: %s. Removing auth user %s.",
                email, exc, auth_user_id,
            )
            self._delete_identity(auth_user_id, request.created_by)
            return ServiceResult(
                success=False,
                error=f"Failed to create user profile: {exc}",
                status_code=400,
            )

        log_audit_event(
            logger=self._logger,
            action="PROVISION_USER",
            entity_type="UserProfile",
            entity_id=profile.id,
            user_id=request.created_by,
            details={"email": email, "role": role, "auth_user_id": auth_user_id},
        )
        return ServiceResult(
            success=True,
            data={
                "success": True,
                "user": convert_to_json_safe(profile.model_dump()),
                "message": SUCCESS_MESSAGE,
            },
        )

    @staticmethod
    def _normalize_role(role: Optional[str]) -> Optional[str]:
        """Lowercase *role* if it is a known role; ``employe`` when blank."""
        candidate = (role or "").strip().lower() or UserRole.EMPLOYE.value
        try:
            return UserRole(candidate).value
        except ValueError:
            return None

    def _email_taken(self, email: str) -> bool:
        """A lookup error is logged and treated as *not taken*."""
        try:
            return self._repo.get_by_email(email) is not None
        except Exception as exc:
            self._logger.warning("Duplicate-email check failed for %s: %s", email, exc)
            return False

    def _delete_identity(self, auth_user_id: str, actor: Optional[str]) -> None:
        """Best-effort compensation for a failed profile insert."""
        try:
            self._db.supabase.auth.admin.delete_user(auth_user_id)
            self._logger.info("Compensating delete succeeded for %s", auth_user_id)
        except Exception as exc:
            self._logger.error(
                "Compensating delete failed; auth user %s is orphaned: %s",
                auth_user_id, exc,
            )
            log_audit_event(
                logger=self._logger,
                action="ORPHANED_IDENTITY",
                entity_type="AuthUser",
                entity_id=auth_user_id,
                user_id=actor,
                details={"error": str(exc)},
            )
