"""Page Registry.

Central registry for the dashboard's navigation entries.  The
``/dashboard/navigation`` route queries this registry to build the
sidebar of the browser front-end.

Adding a page to the navigation = one ``register()`` call.
"""

from __future__ import annotations

from typing import Optional

from app.logger import StructuredLogger


class PageEntry:
    """Metadata for a single navigation entry.

    Attributes
    ----------
    page_id:
        Unique string identifier (e.g. ``'appointments'``).
    display_name:
        Label shown in the sidebar.
    path:
        Front-end route of the page's list view.
    required_roles:
        Lowercase roles that may see this entry; ``None`` means every
        staff member with a profile.
    """

    __slots__ = (
        "page_id",
        "display_name",
        "path",
        "required_roles",
    )

    def __init__(
        self,
        page_id: str,
        display_name: str,
        path: str,
        required_roles: Optional[frozenset[str]],
    ) -> None:
        self.page_id = page_id
        self.display_name = display_name
        self.path = path
        self.required_roles = required_roles

    def is_visible_to(self, role: Optional[str]) -> bool:
        if self.required_roles is None:
            return True
        return (role or "").strip().lower() in self.required_roles

    def to_dict(self) -> dict[str, str]:
        return {"id": self.page_id, "name": self.display_name, "path": self.path}


class PageRegistry:
    """Manages the collection of registered navigation entries.

    Parameters
    ----------
    logger:
        Structured logger for registration events.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._entries: dict[str, PageEntry] = {}
        self._logger = logger

    def register(
        self,
        page_id: str,
        display_name: str,
        path: str,
        required_roles: Optional[frozenset[str]] = None,
    ) -> None:
        """Register a navigation entry; re-registering replaces it in place."""
        if page_id in self._entries:
            self._logger.warning(
                "Page '%s' already registered; overwriting.", page_id,
            )
        roles = (
            frozenset(r.lower() for r in required_roles)
            if required_roles is not None
            else None
        )
        self._entries[page_id] = PageEntry(
            page_id=page_id,
            display_name=display_name,
            path=path,
            required_roles=roles,
        )
        self._logger.debug("Page registered: %s (%s)", page_id, display_name)

    def get_pages_for_role(self, role: Optional[str]) -> list[PageEntry]:
        """Return entries visible to *role*, preserving registration order."""
        return [entry for entry in self._entries.values() if entry.is_visible_to(role)]

    def get_page(self, page_id: str) -> PageEntry:
        """Return a specific entry by ID.

        Raises
        ------
        KeyError
            If *page_id* is not registered.
        """
        if page_id not in self._entries:
            raise KeyError(f"Page '{page_id}' is not registered.")
        return self._entries[page_id]
