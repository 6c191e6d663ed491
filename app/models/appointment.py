"""
Appointment Models.

Create payload for the ``dd-rdv`` table.  The form submits the day and
the time of day separately; they are combined into a single
``date_rdv`` timestamp on insert.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field

from app.models.enums import AppointmentStatus
from app.utils.general import blank_to_none, convert_to_json_safe


class AppointmentCreate(BaseModel):
    """Validated input of the *new appointment* form.

    ``client_id`` is optional: walk-in appointments have no client record.
    """

    client_id: Optional[str] = None
    service_id: str = Field(min_length=1)
    employe_id: str = Field(min_length=1)
    date_rdv: date
    time_rdv: time
    duree: int = Field(default=60, ge=5, le=24 * 60)
    note: Optional[str] = None

    def to_row(self, created_by: str) -> dict[str, object]:
        row = blank_to_none(
            {
                "client_id": self.client_id,
                "service_id": self.service_id,
                "employe_id": self.employe_id,
                "date_rdv": datetime.combine(self.date_rdv, self.time_rdv),
                "duree": self.duree,
                "statut": AppointmentStatus.EN_ATTENTE,
                "note": self.note,
                "created_by": created_by,
            },
            "client_id",
            "note",
        )
        return convert_to_json_safe(row)
