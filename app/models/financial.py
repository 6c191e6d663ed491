"""
Financial Models.

Create payloads for the ``dd-depenses`` (expenses) and ``dd-revenues``
tables.  Financial rows record who entered them in ``enregistre_par``
rather than ``created_by``.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import ExpenseCategory, RevenueType
from app.utils.general import blank_to_none, convert_to_json_safe


class ExpenseCreate(BaseModel):
    categorie: ExpenseCategory
    montant: Decimal = Field(gt=0)
    date: dt.date
    fournisseur_id: Optional[str] = None
    note: Optional[str] = None

    def to_row(self, created_by: str) -> dict[str, object]:
        row = blank_to_none(
            {
                "categorie": self.categorie,
                "montant": self.montant,
                "date": self.date,
                "fournisseur_id": self.fournisseur_id,
                "note": self.note,
                "enregistre_par": created_by,
            },
            "fournisseur_id",
            "note",
        )
        return convert_to_json_safe(row)


class RevenueCreate(BaseModel):
    type: RevenueType
    source_id: Optional[str] = None
    montant: Decimal = Field(gt=0)
    date: dt.date
    note: Optional[str] = None

    def to_row(self, created_by: str) -> dict[str, object]:
        row = blank_to_none(
            {
                "type": self.type,
                "source_id": self.source_id,
                "montant": self.montant,
                "date": self.date,
                "note": self.note,
                "enregistre_par": created_by,
            },
            "source_id",
            "note",
        )
        return convert_to_json_safe(row)
