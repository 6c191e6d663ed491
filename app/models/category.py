"""
Category Models.

Create payload for the ``dd-categories`` table.  Product and service
catalogues share the table and are told apart by ``type``; a category
may nest under a parent of the same type.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import CategoryType
from app.utils.general import blank_to_none, convert_to_json_safe


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    type: CategoryType = CategoryType.PRODUCT
    parent_id: Optional[str] = None

    def to_row(self, created_by: str) -> dict[str, object]:
        row = blank_to_none(
            {
                "name": self.name.strip(),
                "description": self.description,
                "type": self.type,
                "parent_id": self.parent_id,
                "is_active": True,
                "created_by": created_by,
            },
            "description",
            "parent_id",
        )
        return convert_to_json_safe(row)
