"""
Tests for the organization request dispatcher.

The manager and validator are ``unittest.mock`` fakes so these tests
pin down the dispatcher's own contract: validation before any domain
call, one manager call per operation, status selection, link
enrichment, and ``Link`` header construction.
"""

from unittest.mock import Mock

import pytest

from orgapi.context import ServiceContext
from orgapi.errors import BadRequestError, ConflictError, NotFoundError, ServerError
from orgapi.models.organization import Member, Organization
from orgapi.pagination import Page
from orgapi.services.links_injector import OrganizationLinksInjector
from orgapi.services.organization_service import OPERATION_STATUS, OrganizationService

BASE = "http://localhost"


def _org(org_id: str, name: str, parent: str | None = None) -> Organization:
    return Organization(id=org_id, name=name, qualified_name=name, parent_id=parent)


def _context(path: str = "/organization", query=(), user: str | None = "alice"):
    return ServiceContext(
        base_url=BASE,
        request_url=BASE + path,
        query=tuple(query),
        current_user_id=user,
    )


@pytest.fixture
def manager():
    return Mock()


@pytest.fixture
def validator():
    return Mock()


@pytest.fixture
def service(manager, validator):
    return OrganizationService(
        manager=manager,
        validator=validator,
        links_injector=OrganizationLinksInjector(),
    )


class TestSingleResourceOperations:

    def test_create_returns_201_with_links(self, service, manager, validator):
        body = {"name": "acme"}
        manager.create.return_value = _org("org1", "acme")

        result = service.create(body, _context())

        validator.check_organization.assert_called_once_with(body)
        manager.create.assert_called_once_with(body, creator_id="alice")
        assert result.status == 201
        assert result.body["id"] == "org1"
        assert result.body["links"][0] == {
            "rel": "self",
            "href": f"{BASE}/organization/org1",
            "method": "GET",
        }

    def test_create_invalid_body_never_reaches_manager(self, service, manager, validator):
        validator.check_organization.side_effect = BadRequestError("Organization required")

        with pytest.raises(BadRequestError):
            service.create(None, _context())

        manager.create.assert_not_called()

    def test_create_conflict_propagates(self, service, manager):
        manager.create.side_effect = ConflictError("Organization with name 'acme' already exists")

        with pytest.raises(ConflictError):
            service.create({"name": "acme"}, _context())

    def test_update_addresses_path_id_not_body_id(self, service, manager):
        body = {"id": "someone-else", "name": "renamed"}
        manager.update.return_value = _org("org1", "renamed")

        result = service.update("org1", body, _context())

        manager.update.assert_called_once_with("org1", body, user_id="alice")
        assert result.status == 200
        assert result.body["id"] == "org1"

    def test_update_unknown_id_propagates_not_found(self, service, manager):
        manager.update.side_effect = NotFoundError("Organization with id 'nope' doesn't exist")

        with pytest.raises(NotFoundError):
            service.update("nope", {"name": "x"}, _context())

    def test_remove_returns_204_without_body(self, service, manager):
        result = service.remove("org1", _context())

        manager.remove.assert_called_once_with("org1", user_id="alice")
        assert result.status == 204
        assert result.body is None

    def test_remove_server_failure_propagates(self, service, manager):
        manager.remove.side_effect = ServerError("Internal server error occurred")

        with pytest.raises(ServerError):
            service.remove("org1", _context())

    def test_get_by_id(self, service, manager):
        manager.get_by_id.return_value = _org("org2", "rd", parent="org1")

        result = service.get_by_id("org2", _context())

        assert result.status == 200
        rels = {link["rel"] for link in result.body["links"]}
        assert rels == {"self", "suborganizations", "members", "parent"}

    @pytest.mark.parametrize("name", [None, ""])
    def test_find_requires_name(self, service, manager, name):
        with pytest.raises(BadRequestError, match="Missed organization's name"):
            service.find(name, _context())

        manager.get_by_name.assert_not_called()

    def test_find_by_qualified_name(self, service, manager):
        manager.get_by_name.return_value = _org("org1", "acme")

        result = service.find("acme", _context())

        manager.get_by_name.assert_called_once_with("acme")
        assert result.status == 200
        assert result.body["name"] == "acme"


class TestListOperations:

    def test_get_by_parent_defaults_window(self, service, manager):
        manager.get_by_parent.return_value = Page([], 0, 30, 0)

        result = service.get_by_parent("org1", _context())

        manager.get_by_parent.assert_called_once_with("org1", 30, 0)
        assert result.status == 200
        assert result.body == []
        assert "Link" not in result.headers

    def test_configured_default_page_size(self, manager, validator):
        service = OrganizationService(
            manager, validator, OrganizationLinksInjector(), default_max_items=5
        )
        manager.get_by_parent.return_value = Page([], 0, 5, 0)

        service.get_by_parent("org1", _context())

        manager.get_by_parent.assert_called_once_with("org1", 5, 0)

    @pytest.mark.parametrize("max_items, skip_count", [(-1, 0), (30, -1), (-2, -2)])
    def test_negative_window_never_reaches_manager(
        self, service, manager, max_items, skip_count
    ):
        with pytest.raises(BadRequestError):
            service.get_by_parent(
                "org1", _context(), max_items=max_items, skip_count=skip_count
            )
        with pytest.raises(BadRequestError):
            service.get_organizations(
                _context(), max_items=max_items, skip_count=skip_count
            )

        manager.get_by_parent.assert_not_called()
        manager.get_by_member.assert_not_called()

    def test_get_by_parent_builds_link_header(self, service, manager):
        children = [_org(f"org{n}", f"child{n}", parent="root") for n in range(10)]
        manager.get_by_parent.return_value = Page.from_sequence(children, 3, 6)
        context = _context(
            "/organization/root/organizations",
            query=[("maxItems", "3"), ("skipCount", "6")],
        )

        result = service.get_by_parent("root", context, max_items=3, skip_count=6)

        assert [item["id"] for item in result.body] == ["org6", "org7", "org8"]
        assert all("links" in item for item in result.body)
        url = f"{BASE}/organization/root/organizations"
        assert result.headers["Link"] == (
            f'<{url}?maxItems=3&skipCount=3>; rel="prev", '
            f'<{url}?maxItems=3&skipCount=9>; rel="next"'
        )

    def test_single_page_has_no_link_header(self, service, manager):
        orgs = [_org(f"org{n}", f"org{n}") for n in range(5)]
        manager.get_by_member.return_value = Page.from_sequence(orgs, 10, 0)

        result = service.get_organizations(_context(), max_items=10, skip_count=0)

        assert len(result.body) == 5
        assert result.headers == {}

    def test_get_organizations_defaults_to_current_user(self, service, manager):
        orgs = [_org("org1", "acme")]
        manager.get_by_member.side_effect = lambda user, m, s: Page.from_sequence(orgs, m, s)

        implicit = service.get_organizations(_context(user="alice"))
        explicit = service.get_organizations(_context(user="alice"), user_id="alice")

        assert manager.get_by_member.call_args_list[0] == manager.get_by_member.call_args_list[1]
        manager.get_by_member.assert_called_with("alice", 30, 0)
        assert implicit == explicit

    def test_get_organizations_for_other_user(self, service, manager):
        manager.get_by_member.return_value = Page([], 0, 30, 0)

        service.get_organizations(_context(user="alice"), user_id="bob")

        manager.get_by_member.assert_called_once_with("bob", 30, 0)

    def test_get_organizations_without_any_user(self, service, manager):
        with pytest.raises(BadRequestError, match="Missed user's id"):
            service.get_organizations(_context(user=None))

        manager.get_by_member.assert_not_called()

    def test_get_members(self, service, manager):
        members = [
            Member(user_id="alice", organization_id="org1", actions="update,delete"),
            Member(user_id="bob", organization_id="org1", actions=""),
        ]
        manager.get_members.return_value = Page.from_sequence(members, 30, 0)

        result = service.get_members("org1", _context())

        assert result.status == 200
        assert result.body == [
            {"userId": "alice", "organizationId": "org1", "actions": ["update", "delete"]},
            {"userId": "bob", "organizationId": "org1", "actions": []},
        ]


def test_status_table_covers_every_operation():
    assert OPERATION_STATUS == {
        "create": 201,
        "update": 200,
        "remove": 204,
        "get_by_id": 200,
        "find": 200,
        "get_by_parent": 200,
        "get_organizations": 200,
        "get_members": 200,
    }
