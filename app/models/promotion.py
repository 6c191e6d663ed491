"""
Promotion Models.

Create payload for the ``dd-promotions`` table.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.enums import PromotionScope, PromotionType
from app.utils.general import convert_to_json_safe


class PromotionCreate(BaseModel):
    """Validated input of the *new promotion* form.

    ``code`` is what cashiers type at checkout; it is stored uppercase.
    Zero amounts and limits mean *no limit* and are stored as ``NULL``.
    """

    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    description: str = ""
    type: PromotionType = PromotionType.PERCENTAGE
    value: Decimal = Field(default=Decimal("0"), ge=0)
    min_purchase_amount: Optional[Decimal] = Field(default=None, ge=0)
    max_discount_amount: Optional[Decimal] = Field(default=None, ge=0)
    start_date: date
    end_date: date
    is_active: bool = True
    applicable_to: PromotionScope = PromotionScope.ALL
    applicable_items: list[str] = Field(default_factory=list)
    customer_segments: list[str] = Field(default_factory=list)
    usage_limit: Optional[int] = Field(default=None, ge=0)
    is_unique_usage: bool = False
    conditions: Optional[str] = None

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def _check_dates(self) -> "PromotionCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.type == PromotionType.PERCENTAGE and self.value > 100:
            raise ValueError("a percentage promotion cannot exceed 100")
        return self

    def to_row(self, created_by: str) -> dict[str, object]:
        row: dict[str, object] = {
            "name": self.name.strip(),
            "code": self.code,
            "description": self.description,
            "type": self.type,
            "value": self.value,
            "min_purchase_amount": self.min_purchase_amount or None,
            "max_discount_amount": self.max_discount_amount or None,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "is_active": self.is_active,
            "applicable_to": self.applicable_to,
            "applicable_items": self.applicable_items,
            "customer_segments": self.customer_segments,
            "usage_limit": self.usage_limit or None,
            "usage_count": 0,
            "is_unique_usage": self.is_unique_usage,
            "conditions": self.conditions or None,
            "created_by": created_by,
        }
        return convert_to_json_safe(row)
