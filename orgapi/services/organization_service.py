"""
Organization service — the request dispatcher of the organization API.

Each public method is one API operation.  It validates its inputs,
makes exactly one call to the organization manager, runs the result
through the links injector, and returns a transport-neutral
``ApiResponse``.  Failures are raised as ``ApiError`` subclasses and
left for the Flask error handlers to render; nothing here catches them.

Collaborators are injected so tests can substitute fakes:

    manager         -> persistence and domain rules (OrganizationManager)
    validator       -> structural checks on bodies (OrganizationValidator)
    links_injector  -> hypermedia links on resources (OrganizationLinksInjector)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from orgapi.context import ServiceContext
from orgapi.pagination import (
    DEFAULT_MAX_ITEMS,
    DEFAULT_SKIP_COUNT,
    Page,
    build_link_set,
    format_link_header,
)
from orgapi.validation import check_argument, check_page_window

logger = logging.getLogger(__name__)

LINK_HEADER = "Link"

# Success status of every operation.  Failure statuses come from the
# ``ApiError`` subclass that was raised.
OPERATION_STATUS: dict[str, int] = {
    "create": 201,
    "update": 200,
    "remove": 204,
    "get_by_id": 200,
    "find": 200,
    "get_by_parent": 200,
    "get_organizations": 200,
    "get_members": 200,
}


class OrganizationManagerProtocol(Protocol):
    def create(self, representation: dict, creator_id: str | None = None) -> Any: ...

    def update(
        self, organization_id: str, representation: dict, user_id: str | None = None
    ) -> Any: ...

    def remove(self, organization_id: str, user_id: str | None = None) -> None: ...

    def get_by_id(self, organization_id: str) -> Any: ...

    def get_by_name(self, qualified_name: str) -> Any: ...

    def get_by_parent(self, parent_id: str, max_items: int, skip_count: int) -> Page: ...

    def get_by_member(self, user_id: str, max_items: int, skip_count: int) -> Page: ...

    def get_members(
        self, organization_id: str, max_items: int, skip_count: int
    ) -> Page: ...


class OrganizationValidatorProtocol(Protocol):
    def check_organization(self, organization: Any) -> None: ...


class LinksInjectorProtocol(Protocol):
    def inject_links(self, organization: dict, context: ServiceContext) -> dict: ...


@dataclass
class ApiResponse:
    """Status, body and headers of a successful operation."""

    status: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)


class OrganizationService:
    """Dispatches organization API operations to the manager."""

    def __init__(
        self,
        manager: OrganizationManagerProtocol,
        validator: OrganizationValidatorProtocol,
        links_injector: LinksInjectorProtocol,
        default_max_items: int = DEFAULT_MAX_ITEMS,
    ):
        self.manager = manager
        self.validator = validator
        self.links_injector = links_injector
        self.default_max_items = default_max_items

    # -- Single-resource operations ---------------------------------------

    def create(self, organization: Any, context: ServiceContext) -> ApiResponse:
        """Create a new organization; the caller becomes its first member."""
        self.validator.check_organization(organization)
        created = self.manager.create(organization, creator_id=context.current_user_id)
        return self._single("create", created, context)

    def update(
        self, organization_id: str, organization: Any, context: ServiceContext
    ) -> ApiResponse:
        """
        Update the organization addressed by ``organization_id``.

        The id always comes from the path; an ``id`` inside the body is
        never used to pick the organization.
        """
        check_argument(bool(organization_id), "Missed organization's id")
        self.validator.check_organization(organization)
        updated = self.manager.update(
            organization_id, organization, user_id=context.current_user_id
        )
        return self._single("update", updated, context)

    def remove(self, organization_id: str, context: ServiceContext) -> ApiResponse:
        """Remove an organization and its sub-organizations."""
        check_argument(bool(organization_id), "Missed organization's id")
        self.manager.remove(organization_id, user_id=context.current_user_id)
        return ApiResponse(status=OPERATION_STATUS["remove"])

    def get_by_id(self, organization_id: str, context: ServiceContext) -> ApiResponse:
        organization = self.manager.get_by_id(organization_id)
        return self._single("get_by_id", organization, context)

    def find(self, name: str | None, context: ServiceContext) -> ApiResponse:
        """Find an organization by its qualified name."""
        check_argument(bool(name), "Missed organization's name")
        organization = self.manager.get_by_name(name)
        return self._single("find", organization, context)

    # -- List operations ---------------------------------------------------

    def get_by_parent(
        self,
        parent_id: str,
        context: ServiceContext,
        max_items: int | None = None,
        skip_count: int | None = None,
    ) -> ApiResponse:
        """List the direct sub-organizations of ``parent_id``."""
        max_items, skip_count = self._window(max_items, skip_count)
        page = self.manager.get_by_parent(parent_id, max_items, skip_count)
        return self._organization_page("get_by_parent", page, context)

    def get_organizations(
        self,
        context: ServiceContext,
        user_id: str | None = None,
        max_items: int | None = None,
        skip_count: int | None = None,
    ) -> ApiResponse:
        """
        List the organizations a user belongs to.

        Without ``user_id`` the authenticated caller's organizations are
        listed.
        """
        max_items, skip_count = self._window(max_items, skip_count)
        if user_id is None:
            user_id = context.current_user_id
        check_argument(user_id is not None, "Missed user's id")
        page = self.manager.get_by_member(user_id, max_items, skip_count)
        return self._organization_page("get_organizations", page, context)

    def get_members(
        self,
        organization_id: str,
        context: ServiceContext,
        max_items: int | None = None,
        skip_count: int | None = None,
    ) -> ApiResponse:
        """List the members of an organization."""
        max_items, skip_count = self._window(max_items, skip_count)
        page = self.manager.get_members(organization_id, max_items, skip_count)
        return self._paged(
            "get_members", page.map(lambda member: member.to_dict()), context
        )

    # -- Response building -------------------------------------------------

    def _window(self, max_items: int | None, skip_count: int | None) -> tuple[int, int]:
        if max_items is None:
            max_items = self.default_max_items
        if skip_count is None:
            skip_count = DEFAULT_SKIP_COUNT
        check_page_window(max_items, skip_count)
        return max_items, skip_count

    def _inject(self, organization, context: ServiceContext) -> dict:
        return self.links_injector.inject_links(organization.to_dict(), context)

    def _single(self, operation: str, organization, context: ServiceContext) -> ApiResponse:
        return ApiResponse(
            status=OPERATION_STATUS[operation],
            body=self._inject(organization, context),
        )

    def _organization_page(
        self, operation: str, page: Page, context: ServiceContext
    ) -> ApiResponse:
        enriched = page.map(lambda organization: self._inject(organization, context))
        return self._paged(operation, enriched, context)

    @staticmethod
    def _paged(operation: str, page: Page, context: ServiceContext) -> ApiResponse:
        links = build_link_set(page, context.request_url, context.query)
        headers = {LINK_HEADER: format_link_header(links)} if links else {}
        logger.debug(
            "%s: %d of %d items from offset %d",
            operation,
            page.size,
            page.total_count,
            page.skip_count,
        )
        return ApiResponse(
            status=OPERATION_STATUS[operation],
            body=list(page.items),
            headers=headers,
        )
