"""
Page Container Service.

Every dashboard page follows the same pattern: list rows of one table,
show one row, create a row from a validated form, change its status or
delete it.  ``PageDefinition`` captures what differs between pages
(table, create model, ordering, status vocabulary, date filter, roles);
``PageContainerService`` runs the shared flow for any of them.

RBAC:
    - Listing / detail: the page's ``view_roles`` (``None`` = any staff
      member with a profile).
    - Create / status change / delete: admin tier only.
"""

from __future__ import annotations

from datetime import date
from typing import Mapping, Optional

from pydantic import BaseModel, ValidationError

from app.auth import CurrentUser
from app.config import AppConfig
from app.logger import StructuredLogger
from app.models.appointment import AppointmentCreate
from app.models.category import CategoryCreate
from app.models.delivery import DeliveryCreate
from app.models.enums import (
    AppointmentStatus,
    DateWindow,
    DeliveryStatus,
    StockStatus,
)
from app.models.financial import ExpenseCreate, RevenueCreate
from app.models.promotion import PromotionCreate
from app.models.service_models import ServiceResult
from app.models.stock import StockCreate
from app.repositories.base_repository import OrderClause, Row
from app.repositories.entity_repository import EntityRepository
from app.services.base_service import BaseService
from app.utils.audit import log_audit_event
from app.utils.dates import resolve_date_window


class PageDefinition(BaseModel):
    """Static description of one dashboard page."""

    key: str
    title: str
    table: str
    create_model: type[BaseModel]
    order: tuple[OrderClause, ...] = ()
    status_column: Optional[str] = None
    statuses: frozenset[str] = frozenset()
    date_column: Optional[str] = None
    # ``date`` columns are compared with plain dates, timestamps with datetimes.
    date_is_day: bool = False
    filter_columns: tuple[str, ...] = ()
    view_roles: Optional[frozenset[str]] = None

    model_config = {"frozen": True}

    @property
    def list_path(self) -> str:
        return f"/admin/{self.key}"


_ADMIN_TIER: frozenset[str] = AppConfig.ADMIN_ROLES

PAGE_DEFINITIONS: tuple[PageDefinition, ...] = (
    PageDefinition(
        key="appointments",
        title="Rendez-vous",
        table="dd-rdv",
        create_model=AppointmentCreate,
        order=(OrderClause("date_rdv"),),
        status_column="statut",
        statuses=frozenset(s.value for s in AppointmentStatus),
        date_column="date_rdv",
    ),
    PageDefinition(
        key="stock",
        title="Gestion des Stocks",
        table="dd-stocks",
        create_model=StockCreate,
        order=(OrderClause("created_at", desc=True),),
        status_column="status",
        statuses=frozenset(s.value for s in StockStatus),
    ),
    PageDefinition(
        key="deliveries",
        title="Livraisons",
        table="dd-livraisons",
        create_model=DeliveryCreate,
        order=(OrderClause("created_at", desc=True),),
        status_column="statut",
        statuses=frozenset(s.value for s in DeliveryStatus),
        date_column="created_at",
    ),
    PageDefinition(
        key="categories",
        title="Catégories",
        table="dd-categories",
        create_model=CategoryCreate,
        order=(
            OrderClause("parent_id", nullsfirst=True),
            OrderClause("name"),
        ),
        filter_columns=("type",),
    ),
    PageDefinition(
        key="promotions",
        title="Promotions",
        table="dd-promotions",
        create_model=PromotionCreate,
        order=(OrderClause("created_at", desc=True),),
        filter_columns=("is_active",),
    ),
    PageDefinition(
        key="expenses",
        title="Dépenses",
        table="dd-depenses",
        create_model=ExpenseCreate,
        order=(OrderClause("date", desc=True),),
        date_column="date",
        date_is_day=True,
        filter_columns=("categorie",),
        view_roles=_ADMIN_TIER,
    ),
    PageDefinition(
        key="revenues",
        title="Revenus",
        table="dd-revenues",
        create_model=RevenueCreate,
        order=(OrderClause("date", desc=True),),
        date_column="date",
        date_is_day=True,
        filter_columns=("type",),
        view_roles=_ADMIN_TIER,
    ),
)


class ListQuery(BaseModel):
    """Query-string parameters of a list view."""

    page: int = 1
    page_size: Optional[int] = None
    status: Optional[str] = None
    window: Optional[DateWindow] = None
    start: Optional[date] = None
    end: Optional[date] = None
    filters: dict[str, str] = {}


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())) or "body"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


class PageContainerService(BaseService):
    """Shared list / detail / create / status / delete flow for all pages."""

    def __init__(
        self,
        repositories: Mapping[str, EntityRepository],
        config: AppConfig,
        logger: StructuredLogger,
        definitions: tuple[PageDefinition, ...] = PAGE_DEFINITIONS,
    ) -> None:
        super().__init__(logger)
        self._repos = dict(repositories)
        self._config = config
        self._definitions: dict[str, PageDefinition] = {d.key: d for d in definitions}

    @property
    def definitions(self) -> list[PageDefinition]:
        return list(self._definitions.values())

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _resolve(
        self,
        page_key: str,
        current_user: CurrentUser,
        *,
        write: bool,
    ) -> tuple[Optional[PageDefinition], Optional[ServiceResult]]:
        definition = self._definitions.get(page_key)
        if definition is None or page_key not in self._repos:
            return None, ServiceResult(
                success=False, error=f"Unknown page '{page_key}'.", status_code=404,
            )
        if write:
            allowed = current_user.is_admin
        elif definition.view_roles is None:
            allowed = True
        else:
            allowed = current_user.normalized_role in definition.view_roles
        if not allowed:
            return None, ServiceResult(
                success=False,
                error="You do not have permission to access this page.",
                status_code=403,
            )
        return definition, None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_items(
        self,
        page_key: str,
        query: ListQuery,
        current_user: CurrentUser,
    ) -> ServiceResult[dict]:
        """One page of rows, newest / soonest first depending on the page."""
        definition, denied = self._resolve(page_key, current_user, write=False)
        if denied is not None:
            return denied

        page_size = query.page_size or self._config.DEFAULT_PAGE_SIZE
        if query.page < 1 or page_size < 1 or page_size > self._config.MAX_PAGE_SIZE:
            return ServiceResult(
                success=False,
                error=(
                    f"page must be >= 1 and page_size between 1 and "
                    f"{self._config.MAX_PAGE_SIZE}."
                ),
                status_code=400,
            )

        filters: dict[str, object] = {
            column: value
            for column, value in query.filters.items()
            if column in definition.filter_columns and value
        }
        if query.status:
            if definition.status_column is None:
                return ServiceResult(
                    success=False,
                    error=f"Page '{page_key}' has no status.",
                    status_code=400,
                )
            if query.status not in definition.statuses:
                return ServiceResult(
                    success=False,
                    error=f"Invalid status '{query.status}'.",
                    status_code=400,
                )
            filters[definition.status_column] = query.status

        date_start = date_end = None
        if query.window is not None:
            if definition.date_column is None:
                return ServiceResult(
                    success=False,
                    error=f"Page '{page_key}' has no date filter.",
                    status_code=400,
                )
            try:
                date_start, date_end = resolve_date_window(
                    query.window, query.start, query.end,
                )
            except ValueError as exc:
                return ServiceResult(success=False, error=str(exc), status_code=400)
            if definition.date_is_day:
                date_start = date_start.date() if date_start else None
                date_end = date_end.date() if date_end else None

        try:
            result = self._repos[page_key].list_page(
                query.page,
                page_size,
                filters=filters,
                date_column=definition.date_column,
                date_start=date_start,
                date_end=date_end,
                order=definition.order,
            )
        except RuntimeError as exc:
            return self._unavailable(exc)
        except Exception as exc:
            self._logger.error("Failed to list %s: %s", page_key, exc)
            return ServiceResult(
                success=False,
                error=f"Database error fetching {page_key}: {exc}",
                status_code=500,
            )
        return ServiceResult(success=True, data=result.to_response())

    def get_item(
        self,
        page_key: str,
        entity_id: str,
        current_user: CurrentUser,
    ) -> ServiceResult[Row]:
        definition, denied = self._resolve(page_key, current_user, write=False)
        if denied is not None:
            return denied
        try:
            row = self._repos[page_key].get_by_id(entity_id)
        except RuntimeError as exc:
            return self._unavailable(exc)
        except Exception as exc:
            self._logger.error("Failed to fetch %s %s: %s", page_key, entity_id, exc)
            return ServiceResult(
                success=False,
                error=f"Database error fetching {page_key}: {exc}",
                status_code=500,
            )
        if row is None:
            return ServiceResult(
                success=False,
                error=f"{definition.title}: item not found.",
                status_code=404,
            )
        return ServiceResult(success=True, data=row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_item(
        self,
        page_key: str,
        payload: Mapping[str, object],
        current_user: CurrentUser,
    ) -> ServiceResult[dict]:
        """Validate *payload* with the page's create model and insert it.

        On success ``data`` carries the stored row and ``redirect_to``,
        the list view the front-end should return to.
        """
        definition, denied = self._resolve(page_key, current_user, write=True)
        if denied is not None:
            return denied

        try:
            form = definition.create_model.model_validate(dict(payload))
        except ValidationError as exc:
            return ServiceResult(
                success=False, error=_validation_message(exc), status_code=422,
            )

        try:
            row = self._repos[page_key].insert(form.to_row(current_user.profile_id))
        except RuntimeError as exc:
            return self._unavailable(exc)
        except Exception as exc:
            self._logger.error("Failed to create %s: %s", page_key, exc)
            return ServiceResult(
                success=False,
                error=f"Could not create {page_key}: {exc}",
                status_code=400,
            )

        log_audit_event(
            logger=self._logger,
            action="CREATE",
            entity_type=page_key,
            entity_id=str(row.get("id", "")),
            user_id=current_user.profile_id,
        )
        return ServiceResult(
            success=True,
            data={"success": True, "data": row, "redirect_to": definition.list_path},
            status_code=201,
        )

    def update_status(
        self,
        page_key: str,
        entity_id: str,
        status: str,
        current_user: CurrentUser,
    ) -> ServiceResult[Row]:
        definition, denied = self._resolve(page_key, current_user, write=True)
        if denied is not None:
            return denied
        if definition.status_column is None:
            return ServiceResult(
                success=False,
                error=f"Page '{page_key}' has no status.",
                status_code=400,
            )
        if status not in definition.statuses:
            return ServiceResult(
                success=False,
                error=(
                    f"Invalid status '{status}'. Must be one of: "
                    f"{', '.join(sorted(definition.statuses))}."
                ),
                status_code=400,
            )

        try:
            row = self._repos[page_key].update(
                entity_id, {definition.status_column: status},
            )
        except RuntimeError as exc:
            return self._unavailable(exc)
        except Exception as exc:
            self._logger.error("Failed to update %s %s: %s", page_key, entity_id, exc)
            return ServiceResult(
                success=False,
                error=f"Could not update {page_key}: {exc}",
                status_code=500,
            )
        if row is None:
            return ServiceResult(
                success=False,
                error=f"{definition.title}: item not found.",
                status_code=404,
            )

        log_audit_event(
            logger=self._logger,
            action="UPDATE_STATUS",
            entity_type=page_key,
            entity_id=entity_id,
            user_id=current_user.profile_id,
            details={"status": status},
        )
        return ServiceResult(success=True, data=row)

    def delete_item(
        self,
        page_key: str,
        entity_id: str,
        current_user: CurrentUser,
    ) -> ServiceResult[dict]:
        definition, denied = self._resolve(page_key, current_user, write=True)
        if denied is not None:
            return denied
        try:
            deleted = self._repos[page_key].delete(entity_id)
        except RuntimeError as exc:
            return self._unavailable(exc)
        except Exception as exc:
            self._logger.error("Failed to delete %s %s: %s", page_key, entity_id, exc)
            return ServiceResult(
                success=False,
                error=f"Could not delete {page_key}: {exc}",
                status_code=500,
            )
        if not deleted:
            return ServiceResult(
                success=False,
                error=f"{definition.title}: item not found.",
                status_code=404,
            )

        log_audit_event(
            logger=self._logger,
            action="DELETE",
            entity_type=page_key,
            entity_id=entity_id,
            user_id=current_user.profile_id,
        )
        return ServiceResult(
            success=True,
            data={"success": True, "redirect_to": definition.list_path},
        )

    def _unavailable(self, exc: RuntimeError) -> ServiceResult:
        self._logger.warning("Database unavailable: %s", exc)
        return ServiceResult(
            success=False, error="Database is not configured.", status_code=503,
        )
