"""
User Administration Routes.

``POST /api/admin/create-user`` keeps the provisioning endpoint's
historical contract: it is not behind a bearer guard, answers
``{success, user, message}`` on success and ``{error}`` with 400 / 500
otherwise, including for malformed bodies.  The body is parsed on the
event loop; the provisioning calls run in the threadpool.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_services, require_user_manager
from app.api.responses import error_response, service_response
from app.auth import CurrentUser
from app.models.service_models import ProvisionUserRequest
from app.services import ServiceContainer

router = APIRouter()


class ActiveUpdate(BaseModel):
    is_active: bool


class RoleUpdate(BaseModel):
    role: str


@router.post("/api/admin/create-user")
async def create_user(
    request: Request,
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    try:
        payload = await request.json()
    except ValueError:
        return error_response("Invalid JSON body", 400)
    if not isinstance(payload, dict):
        return error_response("Invalid JSON body", 400)

    try:
        body = ProvisionUserRequest.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(p) for p in error.get("loc", ())) for error in exc.errors()
        )
        return error_response(f"Invalid request body: {fields}", 400)

    # Blocking Supabase calls
    result = await run_in_threadpool(services["provisioning_service"].create_user, body)
    return service_response(result)


@router.get("/admin/users")
def list_users(
    search: Optional[str] = None,
    user: CurrentUser = Depends(require_user_manager),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    result = services["user_service"].get_all_users(user, search=search)
    if not result.success:
        return service_response(result)
    return JSONResponse({"users": result.data, "total": len(result.data or [])})


@router.patch("/admin/users/{profile_id}/active")
def set_user_active(
    profile_id: str,
    body: ActiveUpdate,
    user: CurrentUser = Depends(require_user_manager),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    return service_response(
        services["user_service"].set_user_active(profile_id, body.is_active, user),
    )


@router.patch("/admin/users/{profile_id}/role")
def update_user_role(
    profile_id: str,
    body: RoleUpdate,
    user: CurrentUser = Depends(require_user_manager),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    return service_response(
        services["user_service"].update_user_role(profile_id, body.role, user),
    )
