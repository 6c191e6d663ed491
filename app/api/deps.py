"""
HTTP Dependencies.

FastAPI dependencies shared by the routers:

- ``get_services``: the ``ServiceContainer`` built at startup.
- ``get_bearer_token``: the raw access token from ``Authorization``.
- ``get_current_user``: verifies the token with the auth provider and
  loads the caller's profile.  An identity without a profile is rejected
  with 401, exactly like a missing token.
- ``require_admin`` / ``require_user_manager``: role gates.

Usage::

    @router.get("/protected")
    def protected_route(user: CurrentUser = Depends(get_current_user)):
        return {"email": user.email}
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth import CurrentUser
from app.models.auth_models import AuthErrorCode
from app.services import ServiceContainer

bearer_scheme = HTTPBearer(auto_error=False, description="Supabase access token")


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    services: ServiceContainer = Depends(get_services),
) -> CurrentUser:
    """Resolve the caller from the bearer token.

    Raises:
        HTTPException: 401 for an invalid token or a missing profile,
            403 for a deactivated profile, 503 when the provider is
            unreachable.
    """
    auth = services["identity"].get_user(token)
    if not auth.success or not auth.user_id:
        unavailable = auth.error_code in (
            AuthErrorCode.SERVICE_UNAVAILABLE,
            AuthErrorCode.NETWORK_ERROR,
        )
        raise HTTPException(
            status_code=(
                status.HTTP_503_SERVICE_UNAVAILABLE
                if unavailable
                else status.HTTP_401_UNAUTHORIZED
            ),
            detail=auth.error_message or "Not authenticated",
        )

    result = services["user_service"].get_profile_for_identity(auth.user_id)
    if not result.success or result.data is None:
        raise HTTPException(status_code=result.status_code, detail=result.error)

    return CurrentUser(
        auth_user_id=auth.user_id,
        email=auth.email,
        access_token=token,
        profile=result.data,
    )


def require_admin(
    user: CurrentUser = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
) -> CurrentUser:
    """Admin-tier gate, re-read from the profile table on every call."""
    if not services["role_resolver"].is_admin(user.auth_user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required.",
        )
    return user


def require_user_manager(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_user_manager:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admin users can manage users.",
        )
    return user
