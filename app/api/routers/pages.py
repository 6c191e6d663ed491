"""
Page Container Routes.

One set of routes serves every dashboard page; ``{page_key}`` selects the
``PageDefinition`` (appointments, stock, deliveries, categories,
promotions, expenses, revenues).  Writes pass the admin-tier gate.
Must be included after the more specific ``/admin/...`` routers.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.api.deps import get_current_user, get_services, require_admin
from app.api.responses import service_response
from app.auth import CurrentUser
from app.models.enums import DateWindow
from app.services import ServiceContainer
from app.services.pages import ListQuery

router = APIRouter()

_RESERVED_PARAMS: frozenset[str] = frozenset(
    {"page", "page_size", "status", "window", "start", "end"}
)


class StatusUpdate(BaseModel):
    status: str


@router.get("/admin/{page_key}")
def list_items(
    page_key: str,
    request: Request,
    page: int = 1,
    page_size: Optional[int] = None,
    status: Optional[str] = None,
    window: Optional[DateWindow] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: CurrentUser = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    """Paginated list.  Extra query parameters act as column filters
    where the page allows them (e.g. ``?type=service`` on categories).
    """
    if window is None and (start is not None or end is not None):
        window = DateWindow.RANGE
    filters = {
        key: value
        for key, value in request.query_params.items()
        if key not in _RESERVED_PARAMS
    }
    query = ListQuery(
        page=page,
        page_size=page_size,
        status=status,
        window=window,
        start=start,
        end=end,
        filters=filters,
    )
    return service_response(services["page_service"].list_items(page_key, query, user))


@router.get("/admin/{page_key}/{entity_id}")
def get_item(
    page_key: str,
    entity_id: str,
    user: CurrentUser = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    return service_response(services["page_service"].get_item(page_key, entity_id, user))


@router.post("/admin/{page_key}")
def create_item(
    page_key: str,
    payload: dict[str, Any] = Body(...),
    user: CurrentUser = Depends(require_admin),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    """Create a row; answers 201 ``{success, data, redirect_to}``."""
    return service_response(services["page_service"].create_item(page_key, payload, user))


@router.patch("/admin/{page_key}/{entity_id}/status")
def update_status(
    page_key: str,
    entity_id: str,
    body: StatusUpdate,
    user: CurrentUser = Depends(require_admin),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    return service_response(
        services["page_service"].update_status(page_key, entity_id, body.status, user),
    )


@router.delete("/admin/{page_key}/{entity_id}")
def delete_item(
    page_key: str,
    entity_id: str,
    user: CurrentUser = Depends(require_admin),
    services: ServiceContainer = Depends(get_services),
) -> JSONResponse:
    return service_response(services["page_service"].delete_item(page_key, entity_id, user))
