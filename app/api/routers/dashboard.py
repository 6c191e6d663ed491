"""
Dashboard Routes.

Health probe, sidebar navigation and the financial report.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_current_user, get_services, require_admin
from app.api.responses import service_response
from app.auth import CurrentUser
from app.models.enums import DateWindow
from app.services import ServiceContainer

router = APIRouter()


@router.get("/health")
def health(request: Request) -> dict:
    return {"status": "ok", "supabase": request.app.state.db.is_online}


@router.get("/dashboard/navigation")
def navigation(
    user: CurrentUser = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
) -> dict:
    """Pages visible to the caller's role, in sidebar order."""
    entries = services["page_registry"].get_pages_for_role(user.role)
    return {
        "role": user.role,
        "is_admin": user.is_admin,
        "pages": [entry.to_dict() for entry in entries],
    }


@router.get("/admin/reports/financial")
def financial_report(
    window: Optional[DateWindow] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: CurrentUser = Depends(require_admin),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    if window is None and (start is not None or end is not None):
        window = DateWindow.RANGE
    return service_response(
        services["report_service"].get_summary(user, window=window, start=start, end=end),
    )
