"""
Data Models Package.

Re-exports all Pydantic models for convenient imports:
    from app.models import UserProfile, UserRole
    from app.models import AppointmentCreate, DeliveryCreate, PromotionCreate
"""

from __future__ import annotations

from app.models.enums import (
    AppointmentStatus,
    CategoryType,
    DateWindow,
    DeliveryMode,
    DeliveryStatus,
    ExpenseCategory,
    PromotionScope,
    PromotionType,
    RevenueType,
    StockStatus,
    UserRole,
)
from app.models.user import UserProfile
from app.models.appointment import AppointmentCreate
from app.models.category import CategoryCreate
from app.models.delivery import DeliveryCreate
from app.models.financial import ExpenseCreate, RevenueCreate
from app.models.promotion import PromotionCreate
from app.models.stock import StockCreate

__all__ = [
    "AppointmentCreate",
    "AppointmentStatus",
    "CategoryCreate",
    "CategoryType",
    "DateWindow",
    "DeliveryCreate",
    "DeliveryMode",
    "DeliveryStatus",
    "ExpenseCategory",
    "ExpenseCreate",
    "PromotionCreate",
    "PromotionScope",
    "PromotionType",
    "RevenueCreate",
    "RevenueType",
    "StockCreate",
    "StockStatus",
    "UserProfile",
    "UserRole",
]
