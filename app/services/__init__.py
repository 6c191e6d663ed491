"""
Business Logic Services Package.

Services depend on the Repository layer for data access and receive the
authenticated ``CurrentUser`` explicitly; none of them holds per-request
state.

The ``create_services()`` factory wires every repository and service together,
returning a typed dict that the HTTP layer can consume without knowing the
internal dependency graph.
"""

from __future__ import annotations

from typing import Any, Optional, TypedDict

from app.config import AppConfig
from app.database import DatabaseManager
from app.logger import get_logger
from app.repositories.entity_repository import EntityRepository
from app.repositories.user_repository import UserRepository
from app.services.identity import IdentityAccessor
from app.services.page_registry import PageRegistry
from app.services.pages import PAGE_DEFINITIONS, PageContainerService
from app.services.provisioning import ProvisioningService
from app.services.reports import FinancialReportService
from app.services.role_resolver import RoleResolver
from app.services.users import UserService


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    identity: IdentityAccessor
    role_resolver: RoleResolver
    user_service: UserService
    provisioning_service: ProvisioningService
    page_service: PageContainerService
    report_service: FinancialReportService
    page_registry: PageRegistry


def build_page_registry(config: AppConfig) -> PageRegistry:
    """Navigation entries in sidebar order."""
    registry = PageRegistry(logger=get_logger("pages"))
    registry.register("dashboard", "Tableau de bord", "/")
    for definition in PAGE_DEFINITIONS:
        registry.register(
            definition.key,
            definition.title,
            definition.list_path,
            required_roles=definition.view_roles,
        )
    registry.register(
        "financial-report",
        "Rapport financier",
        "/admin/reports/financial",
        required_roles=config.ADMIN_ROLES,
    )
    registry.register(
        "users",
        "Utilisateurs",
        "/admin/users",
        required_roles=config.USER_MANAGER_ROLES,
    )
    return registry


def create_services(
    db: DatabaseManager,
    config: AppConfig,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application factory calls this once at startup.

    Args:
        db: Initialised DatabaseManager.
        config: Application configuration (injected into services that need it).

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    user_repo = UserRepository(db=db, logger=logger, table=config.PROFILE_TABLE)
    entity_repos: dict[str, EntityRepository] = {
        definition.key: EntityRepository(db=db, logger=logger, table=definition.table)
        for definition in PAGE_DEFINITIONS
    }

    # ------------------------------------------------------------------
    # 2. Services
    # ------------------------------------------------------------------
    identity = IdentityAccessor(db=db, user_repo=user_repo, logger=logger)
    auth_logger = get_logger("auth")

    def _log_auth_event(event: str, session: Optional[Any]) -> None:
        auth_logger.info("Auth state change: %s", event, extra={"event": str(event)})

    identity.on_auth_state_change(_log_auth_event)

    role_resolver = RoleResolver(repo=user_repo, config=config, logger=logger)
    user_service = UserService(repo=user_repo, logger=logger)
    provisioning_service = ProvisioningService(repo=user_repo, db=db, logger=logger)
    page_service = PageContainerService(
        repositories=entity_repos,
        config=config,
        logger=logger,
    )
    report_service = FinancialReportService(
        revenue_repo=entity_repos["revenues"],
        expense_repo=entity_repos["expenses"],
        logger=logger,
    )

    return ServiceContainer(
        identity=identity,
        role_resolver=role_resolver,
        user_service=user_service,
        provisioning_service=provisioning_service,
        page_service=page_service,
        report_service=report_service,
        page_registry=build_page_registry(config),
    )
