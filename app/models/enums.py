"""
Shared Enumerations for Dashboard Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so code like ``if role == 'admin'`` continues to work.
"""

from __future__ import annotations
from enum import StrEnum


class UserRole(StrEnum):
    """Roles a staff profile may carry.

    Stored lowercase in the profile table.  Admin tier is
    ``{ADMIN, SUPERADMIN, MANAGER}`` (see ``AppConfig.ADMIN_ROLES``).
    """

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    MANAGER = "manager"
    CAISSIERE = "caissiere"
    EMPLOYE = "employe"


class AppointmentStatus(StrEnum):
    """Lifecycle of a salon appointment (``dd-rdv.statut``)."""

    EN_ATTENTE = "en_attente"
    CONFIRME = "confirme"
    TERMINE = "termine"
    ANNULE = "annule"
    NO_SHOW = "no_show"


class DeliveryStatus(StrEnum):
    """Lifecycle of a delivery (``dd-livraisons.statut``)."""

    EN_PREPARATION = "en_preparation"
    EXPEDIE = "expedie"
    LIVRE = "livre"
    ANNULE = "annule"
    RETOURNE = "retourne"


class DeliveryMode(StrEnum):
    """Whether a delivery is handled by staff or a carrier."""

    INTERNE = "interne"
    EXTERNE = "externe"


class StockStatus(StrEnum):
    ACTIVE = "active"
    CLOSED = "closed"
    ARCHIVED = "archived"


class CategoryType(StrEnum):
    """Categories are split between the product and service catalogues."""

    PRODUCT = "product"
    SERVICE = "service"


class PromotionType(StrEnum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    BUY_X_GET_Y = "buy_x_get_y"
    FREE_SHIPPING = "free_shipping"


class PromotionScope(StrEnum):
    ALL = "all"
    PRODUCTS = "products"
    SERVICES = "services"
    SPECIFIC_ITEMS = "specific_items"


class ExpenseCategory(StrEnum):
    ACHAT_PRODUITS = "achat_produits"
    SALAIRE = "salaire"
    CHARGES = "charges"
    LOYER = "loyer"
    ELECTRICITE = "electricite"
    EAU = "eau"
    INTERNET = "internet"
    MARKETING = "marketing"
    EQUIPEMENT = "equipement"
    FORMATION = "formation"
    TRANSPORT = "transport"
    MAINTENANCE = "maintenance"
    AUTRE = "autre"


class RevenueType(StrEnum):
    VENTE = "vente"
    SERVICE = "service"
    ABONNEMENT = "abonnement"
    PARTENARIAT = "partenariat"
    INVESTISSEMENT = "investissement"
    AUTRE = "autre"


class DateWindow(StrEnum):
    """Preset list filters on a timestamp column.

    ``RANGE`` requires explicit start / end dates.
    """

    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    MONTH = "month"
    RANGE = "range"
