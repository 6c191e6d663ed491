"""
Financial Report Service.

Totals revenues and expenses over a date window for the financial
report page.  Amounts are summed as ``Decimal`` so that cents never
drift through float accumulation.

RBAC: admin tier only.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from app.auth import CurrentUser
from app.logger import StructuredLogger
from app.models.enums import DateWindow
from app.models.service_models import FinancialSummary, ServiceResult
from app.repositories.base_repository import Row
from app.repositories.entity_repository import EntityRepository
from app.services.base_service import BaseService
from app.utils.dates import resolve_date_window
from app.utils.general import convert_to_json_safe

_AMOUNT_COLUMN: str = "montant"
_DATE_COLUMN: str = "date"


def _sum_amounts(rows: list[Row]) -> Decimal:
    total = Decimal("0")
    for row in rows:
        raw = row.get(_AMOUNT_COLUMN)
        if raw is None:
            continue
        try:
            total += Decimal(str(raw))
        except InvalidOperation:
            continue
    return total


class FinancialReportService(BaseService):
    """Service layer for the revenue / expense summary."""

    def __init__(
        self,
        revenue_repo: EntityRepository,
        expense_repo: EntityRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._revenue_repo = revenue_repo
        self._expense_repo = expense_repo

    def get_summary(
        self,
        current_user: CurrentUser,
        window: Optional[DateWindow] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> ServiceResult[dict]:
        """
        Revenue, expense and net totals over the requested window.

        Returns:
            ServiceResult with data dict containing:
                - total_revenue / total_expenses / net (float)
                - revenue_count / expense_count (int)
                - start / end (ISO date or ``None`` when unbounded)
        """
        if not current_user.is_admin:
            return ServiceResult(
                success=False,
                error="Only admin users can view financial reports.",
                status_code=403,
            )

        try:
            bounds = resolve_date_window(window, start, end)
        except ValueError as exc:
            return ServiceResult(success=False, error=str(exc), status_code=400)
        day_start = bounds.start.date() if bounds.start else None
        day_end = bounds.end.date() if bounds.end else None

        try:
            revenues = self._revenue_repo.get_amounts(
                _AMOUNT_COLUMN, _DATE_COLUMN, day_start, day_end,
            )
            expenses = self._expense_repo.get_amounts(
                _AMOUNT_COLUMN, _DATE_COLUMN, day_start, day_end,
            )
        except RuntimeError as exc:
            self._logger.warning("Database unavailable: %s", exc)
            return ServiceResult(
                success=False, error="Database is not configured.", status_code=503,
            )
        except Exception as exc:
            self._logger.error("Financial summary query failed: %s", exc)
            return ServiceResult(
                success=False,
                error=f"Database error computing financial summary: {exc}",
                status_code=500,
            )

        summary = FinancialSummary(
            total_revenue=_sum_amounts(revenues),
            total_expenses=_sum_amounts(expenses),
            revenue_count=len(revenues),
            expense_count=len(expenses),
        )
        return ServiceResult(
            success=True,
            data=convert_to_json_safe({
                "total_revenue": summary.total_revenue,
                "total_expenses": summary.total_expenses,
                "net": summary.net,
                "revenue_count": summary.revenue_count,
                "expense_count": summary.expense_count,
                # ``end`` is exclusive internally; report the last included day.
                "start": day_start,
                "end": (
                    date.fromordinal(day_end.toordinal() - 1) if day_end else None
                ),
            }),
        )
