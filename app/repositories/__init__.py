"""
Repository Layer Package.

Provides data-access abstractions over the Supabase tables.  All table
access flows through repositories; services never query
``db.supabase`` directly.

Usage:
    from app.repositories.user_repository import UserRepository
    from app.repositories.entity_repository import EntityRepository
"""

from app.repositories.base_repository import BaseRepository, OrderClause
from app.repositories.entity_repository import EntityRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "EntityRepository",
    "OrderClause",
    "UserRepository",
]
