"""
Structured Audit Logging Utility.

Every state change the dashboard performs (provisioning, activation
toggles, role changes, page-container writes) is logged as one structured
JSON object.  Provides a Pydantic-validated model and a single function
for consistent audit trail entries.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field

from app.logger import StructuredLogger

__all__ = ["AuditEvent", "log_audit_event"]

# Scalar type permitted inside the ``details`` mapping.  Kept flat;
# nested structures should be modelled explicitly.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    """Schema-validated representation of a single audit trail entry."""

    timestamp: str
    action: str
    entity_type: str
    entity_id: str
    user_id: str
    details: dict[str, DetailValue] = Field(default_factory=dict)


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    entity_type: str,
    entity_id: str,
    user_id: Optional[str],
    details: Optional[dict[str, DetailValue]] = None,
) -> AuditEvent:
    """Log a structured JSON audit event and return it.

    Args:
        logger: The logger instance to write to.
        action: What happened (e.g. ``"PROVISION_USER"``, ``"CREATE"``,
            ``"UPDATE_STATUS"``, ``"UPDATE_ROLE"``).
        entity_type: Type of entity affected (e.g. ``"UserProfile"``,
            ``"appointments"``).
        entity_id: Primary key of the affected entity.
        user_id: Profile id of the actor; ``"anonymous"`` when unknown.
        details: Optional additional context (e.g. old/new values).
    """
    event = AuditEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id or "anonymous",
        details=details or {},
    )
    logger.info("AUDIT: %s", json.dumps(event.model_dump(), default=str))
    return event
