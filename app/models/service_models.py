"""
Service Layer Data Transfer Objects.

Pydantic models for validated input/output at service boundaries.
Replaces raw dict passing between layers.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

__all__ = [
    "FinancialSummary",
    "Page",
    "ProvisionUserRequest",
    "ServiceResult",
]


# ---------------------------------------------------------------------------
# Provisioning
# ---------------------------------------------------------------------------

class ProvisionUserRequest(BaseModel):
    """Body of ``POST /api/admin/create-user``.

    Only ``email`` and ``password`` are strictly required; empty optional
    strings are stored as ``NULL``.
    """

    email: str = Field(min_length=3)
    password: str = Field(min_length=6)
    pseudo: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: str = "employe"
    created_by: Optional[str] = None


# ---------------------------------------------------------------------------
# Page container listings
# ---------------------------------------------------------------------------

class Page(BaseModel, Generic[T]):
    """One page of a paginated list view."""

    items: list[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return -(-self.total // self.page_size)

    def to_response(self) -> dict[str, object]:
        return {
            "items": self.items,
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }


# ---------------------------------------------------------------------------
# Financial report
# ---------------------------------------------------------------------------

class FinancialSummary(BaseModel):
    """Output of ``FinancialReportService.summarize``."""

    total_revenue: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    revenue_count: int = 0
    expense_count: int = 0

    @property
    def net(self) -> Decimal:
        return self.total_revenue - self.total_expenses


# ---------------------------------------------------------------------------
# Generic service models
# ---------------------------------------------------------------------------

class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    All service methods return this, providing a consistent contract
    for the HTTP layer.  ``status_code`` is the HTTP status the router
    should answer with.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
