"""
Base Repository.

Provides shared infrastructure for all repositories:
- DatabaseManager reference (service-role Supabase client)
- Logger reference
- Helpers for the PostgREST response shapes returned by supabase-py
- Pagination and ordering applied to select queries
"""

from __future__ import annotations

from datetime import date
from typing import NamedTuple, Optional, Sequence

from supabase import Client as SupabaseClient

from app.database import DatabaseManager
from app.logger import StructuredLogger
from app.models.service_models import Page

Row = dict[str, object]


class OrderClause(NamedTuple):
    """One ``ORDER BY`` term for :meth:`BaseRepository._select_page`."""

    column: str
    desc: bool = False
    nullsfirst: Optional[bool] = None


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__.

    Repositories let provider exceptions propagate; services decide
    whether a failure is swallowed, classified or reported.
    """

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the service-role Supabase client."""
        return self._db.supabase

    # ------------------------------------------------------------------
    # Response helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _single_row(response: object) -> Optional[Row]:
        """Extract the row from a ``maybe_single()`` response.

        Depending on the postgrest-py release, a miss yields either
        ``None`` or a response whose ``data`` is ``None``.
        """
        if response is None:
            return None
        data = getattr(response, "data", None)
        if isinstance(data, list):
            return data[0] if data else None
        return data or None

    @staticmethod
    def _rows(response: object) -> list[Row]:
        if response is None:
            return []
        return list(getattr(response, "data", None) or [])

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def _select_page(
        self,
        page: int,
        page_size: int,
        *,
        columns: str = "*",
        filters: Optional[dict[str, object]] = None,
        date_column: Optional[str] = None,
        date_start: Optional[date] = None,
        date_end: Optional[date] = None,
        order: Sequence[OrderClause] = (),
    ) -> Page[Row]:
        """Run a counted, ranged select against :attr:`TABLE`.

        *page* is 1-based.  ``date_start`` is inclusive, ``date_end``
        exclusive.  ``None`` filter values are skipped.
        """
        first = (page - 1) * page_size
        last = first + page_size - 1

        query = self.supabase.table(self.TABLE).select(columns, count="exact")
        for column, value in (filters or {}).items():
            if value is not None:
                query = query.eq(column, value)
        if date_column and date_start is not None:
            query = query.gte(date_column, date_start.isoformat())
        if date_column and date_end is not None:
            query = query.lt(date_column, date_end.isoformat())
        for clause in order:
            if clause.nullsfirst is None:
                query = query.order(clause.column, desc=clause.desc)
            else:
                query = query.order(
                    clause.column, desc=clause.desc, nullsfirst=clause.nullsfirst,
                )

        response = query.range(first, last).execute()
        rows = self._rows(response)
        total = getattr(response, "count", None)
        return Page[Row](
            items=rows,
            total=total if total is not None else len(rows),
            page=page,
            page_size=page_size,
        )
