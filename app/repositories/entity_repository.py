"""
Dashboard Entity Repository.

One instance per dashboard table (appointments, stock, deliveries,
categories, promotions, expenses, revenues).  Rows are returned as plain
dicts; the create DTOs in ``app.models`` validate what goes in.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from app.database import DatabaseManager
from app.logger import StructuredLogger
from app.models.service_models import Page
from app.repositories.base_repository import BaseRepository, OrderClause, Row


class EntityRepository(BaseRepository):
    """CRUD access to a single dashboard table."""

    def __init__(
        self,
        db: DatabaseManager,
        logger: StructuredLogger,
        table: str,
    ) -> None:
        super().__init__(db, logger)
        self.TABLE = table

    def list_page(
        self,
        page: int,
        page_size: int,
        *,
        filters: Optional[dict[str, object]] = None,
        date_column: Optional[str] = None,
        date_start: Optional[date] = None,
        date_end: Optional[date] = None,
        order: Sequence[OrderClause] = (),
    ) -> Page[Row]:
        return self._select_page(
            page,
            page_size,
            filters=filters,
            date_column=date_column,
            date_start=date_start,
            date_end=date_end,
            order=order,
        )

    def get_by_id(self, entity_id: str) -> Optional[Row]:
        response = (
            self.supabase.table(self.TABLE)
            .select("*")
            .eq("id", entity_id)
            .maybe_single()
            .execute()
        )
        return self._single_row(response)

    def insert(self, row: Row) -> Row:
        """Insert *row* and return the stored representation.

        Raises:
            ValueError: If the insert returned no representation.
        """
        response = self.supabase.table(self.TABLE).insert(row).execute()
        rows = self._rows(response)
        if not rows:
            raise ValueError(f"Insert into {self.TABLE} returned no row")
        return rows[0]

    def update(self, entity_id: str, changes: Row) -> Optional[Row]:
        response = (
            self.supabase.table(self.TABLE)
            .update(changes)
            .eq("id", entity_id)
            .execute()
        )
        rows = self._rows(response)
        return rows[0] if rows else None

    def delete(self, entity_id: str) -> bool:
        """Delete one row. Returns ``False`` when nothing matched."""
        response = (
            self.supabase.table(self.TABLE)
            .delete()
            .eq("id", entity_id)
            .execute()
        )
        return bool(self._rows(response))

    def get_amounts(
        self,
        amount_column: str,
        date_column: str,
        date_start: Optional[date],
        date_end: Optional[date],
    ) -> list[Row]:
        """Fetch ``(id, amount)`` rows inside a date window for summaries."""
        query = self.supabase.table(self.TABLE).select(f"id, {amount_column}")
        if date_start is not None:
            query = query.gte(date_column, date_start.isoformat())
        if date_end is not None:
            query = query.lt(date_column, date_end.isoformat())
        return self._rows(query.execute())
