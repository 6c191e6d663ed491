"""Translation of service results into HTTP responses."""

from __future__ import annotations

from typing import Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.models.auth_models import AuthErrorCode, AuthResult
from app.models.service_models import ServiceResult

AUTH_ERROR_STATUS: dict[AuthErrorCode, int] = {
    AuthErrorCode.INVALID_CREDENTIALS: 401,
    AuthErrorCode.SESSION_EXPIRED: 401,
    AuthErrorCode.NO_PROFILE: 401,
    AuthErrorCode.EMAIL_NOT_CONFIRMED: 403,
    AuthErrorCode.USER_BANNED: 403,
    AuthErrorCode.EMAIL_ALREADY_EXISTS: 409,
    AuthErrorCode.WEAK_PASSWORD: 400,
    AuthErrorCode.VALIDATION_ERROR: 400,
    AuthErrorCode.NETWORK_ERROR: 503,
    AuthErrorCode.SERVICE_UNAVAILABLE: 503,
    AuthErrorCode.UNKNOWN_ERROR: 500,
}


def error_response(message: Optional[str], status_code: int) -> JSONResponse:
    return JSONResponse({"error": message or "Request failed"}, status_code=status_code)


def service_response(result: ServiceResult) -> JSONResponse:
    """``data`` on success, ``{"error": ...}`` otherwise."""
    if not result.success:
        return error_response(result.error, result.status_code)
    return JSONResponse(jsonable_encoder(result.data), status_code=result.status_code)


def auth_response(result: AuthResult, success_status: int = 200) -> JSONResponse:
    if not result.success:
        code = result.error_code or AuthErrorCode.UNKNOWN_ERROR
        return JSONResponse(
            {"error": result.error_message, "code": str(code)},
            status_code=AUTH_ERROR_STATUS.get(code, 500),
        )
    return JSONResponse(
        jsonable_encoder(result.model_dump(exclude_none=True)),
        status_code=success_status,
    )
