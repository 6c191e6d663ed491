"""Shared utility functions and models for the dashboard backend.

This package provides convenience re-exports so that consumers can import
directly from ``app.utils`` (e.g. ``from app.utils import log_audit_event``)
while full absolute imports remain supported.
"""

from app.utils.audit import AuditEvent, log_audit_event
from app.utils.codes import generate_stock_ref
from app.utils.dates import DateRange, resolve_date_window
from app.utils.general import blank_to_none, convert_to_json_safe

__all__ = [
    "AuditEvent",
    "DateRange",
    "blank_to_none",
    "convert_to_json_safe",
    "generate_stock_ref",
    "log_audit_event",
    "resolve_date_window",
]
