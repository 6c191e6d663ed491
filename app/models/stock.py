"""
Stock Models.

Create payload for the ``dd-stocks`` table.  A stock is a named batch
container identified by a human-readable ``stock_ref``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import StockStatus
from app.utils.codes import generate_stock_ref
from app.utils.general import blank_to_none, convert_to_json_safe


class StockCreate(BaseModel):
    """Validated input of the *new stock* form.

    ``stock_ref`` is generated when the form leaves it blank.
    """

    name: str = Field(min_length=1)
    description: Optional[str] = None
    stock_ref: Optional[str] = None
    status: StockStatus = StockStatus.ACTIVE

    def to_row(self, created_by: str) -> dict[str, object]:
        row = blank_to_none(
            {
                "name": self.name.strip(),
                "description": self.description,
                "stock_ref": (self.stock_ref or "").strip() or generate_stock_ref(),
                "status": self.status,
                "is_active": True,
                "created_by": created_by,
            },
            "description",
        )
        return convert_to_json_safe(row)
