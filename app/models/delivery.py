"""
Delivery Models.

Create payload for the ``dd-livraisons`` table.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import DeliveryMode, DeliveryStatus
from app.utils.general import blank_to_none, convert_to_json_safe


class DeliveryCreate(BaseModel):
    """Validated input of the *new delivery* form.

    A delivery may be attached to a paid sale (``vente_id``) and a client,
    or be free-standing with just an address.
    """

    vente_id: Optional[str] = None
    client_id: Optional[str] = None
    adresse: str = Field(min_length=1)
    livreur_id: Optional[str] = None
    date_livraison: Optional[datetime] = None
    frais: Decimal = Field(default=Decimal("0"), ge=0)
    mode: DeliveryMode = DeliveryMode.INTERNE
    preuve_photo: Optional[str] = None
    note: Optional[str] = None

    def to_row(self, created_by: str) -> dict[str, object]:
        row = blank_to_none(
            {
                "vente_id": self.vente_id,
                "client_id": self.client_id,
                "adresse": self.adresse.strip(),
                "livreur_id": self.livreur_id,
                "statut": DeliveryStatus.EN_PREPARATION,
                "date_livraison": self.date_livraison,
                "frais": self.frais,
                "mode": self.mode,
                "preuve_photo": self.preuve_photo,
                "note": self.note,
                "created_by": created_by,
            },
            "vente_id",
            "client_id",
            "livreur_id",
            "preuve_photo",
            "note",
        )
        return convert_to_json_safe(row)
