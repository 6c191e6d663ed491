"""
Auth Routes.

Thin handlers over ``IdentityAccessor``: sign-up, sign-in (email or
pseudo), sign-out, session restoration and the caller's own identity.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.deps import get_bearer_token, get_current_user, get_services
from app.api.responses import auth_response, error_response
from app.auth import CurrentUser
from app.models.auth_models import SessionRequest, SignInRequest, SignUpRequest
from app.services import ServiceContainer
from app.utils.general import convert_to_json_safe

router = APIRouter()


@router.post("/sign-up")
def sign_up(
    body: SignUpRequest,
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    result = services["identity"].sign_up(body.email, body.password)
    return auth_response(result, success_status=201)


@router.post("/sign-in")
def sign_in(
    body: SignInRequest,
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    """Sign in with ``identifier`` = email or pseudo."""
    return auth_response(services["identity"].sign_in(body.identifier, body.password))


@router.post("/sign-out")
def sign_out(
    token: str = Depends(get_bearer_token),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    return auth_response(services["identity"].sign_out(token))


@router.post("/session")
def restore_session(
    body: SessionRequest,
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    """Restore a session; an identity without a profile is not logged in."""
    result = services["identity"].get_session(body.access_token, body.refresh_token)
    if not result.success or not result.user_id:
        return auth_response(result)

    profile = services["user_service"].get_profile_for_identity(result.user_id)
    if not profile.success:
        return error_response(profile.error, profile.status_code)
    return auth_response(result)


@router.get("/me")
def me(user: CurrentUser = Depends(get_current_user)) -> dict:
    return {
        "auth_user_id": user.auth_user_id,
        "email": user.email,
        "role": user.role,
        "is_admin": user.is_admin,
        "profile": convert_to_json_safe(user.profile.model_dump()),
    }
