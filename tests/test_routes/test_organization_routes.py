"""
HTTP-level tests for the ``/organization`` resource.

These exercise the full stack (routing, session identity, service,
manager, error handlers) through the Flask test client.
"""

from urllib.parse import parse_qs, urlsplit

import pytest


def _create(client, name, parent=None):
    body = {"name": name}
    if parent is not None:
        body["parent"] = parent
    response = client.post("/organization", json=body)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def _link_windows(header: str) -> dict:
    """Parse a ``Link`` header into ``{rel: (maxItems, skipCount)}``."""
    windows = {}
    for entry in header.split(", "):
        locator, rel = entry.split("; ")
        query = parse_qs(urlsplit(locator.strip("<>")).query)
        windows[rel.split('"')[1]] = (
            int(query["maxItems"][0]),
            int(query["skipCount"][0]),
        )
    return windows


class TestAuthentication:

    def test_anonymous_requests_are_rejected(self, client):
        response = client.get("/organization")

        assert response.status_code == 401
        assert response.get_json()["message"] == "Authentication required"


class TestCreate:

    def test_create_returns_201_with_links(self, auth_client):
        response = auth_client.post("/organization", json={"name": "acme"})

        assert response.status_code == 201
        body = response.get_json()
        assert body["name"] == "acme"
        assert body["qualifiedName"] == "acme"
        assert body["parent"] is None
        assert body["links"][0]["rel"] == "self"
        assert body["links"][0]["href"] == f"http://localhost/organization/{body['id']}"

    def test_create_child(self, auth_client):
        root = _create(auth_client, "acme")

        child = _create(auth_client, "research", parent=root["id"])

        assert child["qualifiedName"] == "acme/research"
        parent_link = [link for link in child["links"] if link["rel"] == "parent"]
        assert parent_link[0]["href"].endswith(f"/organization/{root['id']}")

    def test_create_without_body_is_400(self, auth_client):
        response = auth_client.post("/organization", data="not json")

        assert response.status_code == 400
        assert response.get_json()["message"] == "Organization required"

    def test_create_invalid_name_is_400(self, auth_client):
        response = auth_client.post("/organization", json={"name": "bad name"})

        assert response.status_code == 400

    def test_create_duplicate_is_409(self, auth_client):
        root = _create(auth_client, "acme")
        _create(auth_client, "research", parent=root["id"])

        response = auth_client.post(
            "/organization", json={"name": "research", "parent": root["id"]}
        )

        assert response.status_code == 409
        assert "already exists" in response.get_json()["message"]
        assert "links" not in response.get_json()

    def test_create_under_unknown_parent_is_404(self, auth_client):
        response = auth_client.post(
            "/organization", json={"name": "orphan", "parent": "organizationmissing"}
        )

        assert response.status_code == 404


class TestUpdate:

    def test_update_uses_path_id(self, auth_client):
        acme = _create(auth_client, "acme")
        globex = _create(auth_client, "globex")

        response = auth_client.post(
            f"/organization/{acme['id']}",
            json={"id": globex["id"], "name": "initech"},
        )

        assert response.status_code == 200
        assert response.get_json()["id"] == acme["id"]
        assert response.get_json()["name"] == "initech"
        untouched = auth_client.get(f"/organization/{globex['id']}").get_json()
        assert untouched["name"] == "globex"

    def test_update_unknown_id_is_404(self, auth_client):
        response = auth_client.post(
            "/organization/organizationmissing", json={"name": "acme"}
        )

        assert response.status_code == 404

    def test_update_to_taken_name_is_409(self, auth_client):
        _create(auth_client, "acme")
        globex = _create(auth_client, "globex")

        response = auth_client.post(
            f"/organization/{globex['id']}", json={"name": "acme"}
        )

        assert response.status_code == 409

    def test_update_invalid_body_is_400(self, auth_client):
        acme = _create(auth_client, "acme")

        response = auth_client.post(f"/organization/{acme['id']}", json={})

        assert response.status_code == 400


class TestRemove:

    def test_remove_returns_204(self, auth_client):
        acme = _create(auth_client, "acme")

        response = auth_client.delete(f"/organization/{acme['id']}")

        assert response.status_code == 204
        assert response.data == b""
        assert auth_client.get(f"/organization/{acme['id']}").status_code == 404

    def test_remove_unknown_id_still_204(self, auth_client):
        response = auth_client.delete("/organization/organizationmissing")

        assert response.status_code == 204


class TestLookups:

    def test_get_by_id(self, auth_client):
        acme = _create(auth_client, "acme")

        response = auth_client.get(f"/organization/{acme['id']}")

        assert response.status_code == 200
        assert response.get_json() == acme

    def test_get_by_unknown_id_is_404(self, auth_client):
        response = auth_client.get("/organization/organizationmissing")

        assert response.status_code == 404
        assert response.get_json()["status"] == 404

    def test_find_by_qualified_name(self, auth_client):
        root = _create(auth_client, "acme")
        child = _create(auth_client, "research", parent=root["id"])

        response = auth_client.get("/organization/find?name=acme/research")

        assert response.status_code == 200
        assert response.get_json()["id"] == child["id"]

    @pytest.mark.parametrize("query", ["", "?name="])
    def test_find_without_name_is_400(self, auth_client, query):
        response = auth_client.get(f"/organization/find{query}")

        assert response.status_code == 400
        assert response.get_json()["message"] == "Missed organization's name"

    def test_find_unknown_name_is_404(self, auth_client):
        response = auth_client.get("/organization/find?name=nobody")

        assert response.status_code == 404


class TestChildOrganizations:

    @pytest.fixture
    def root(self, auth_client):
        root = _create(auth_client, "root")
        for n in range(10):
            _create(auth_client, f"child{n}", parent=root["id"])
        return root

    def test_middle_page(self, auth_client, root):
        response = auth_client.get(
            f"/organization/{root['id']}/organizations?maxItems=3&skipCount=6"
        )

        assert response.status_code == 200
        assert [org["name"] for org in response.get_json()] == [
            "child6",
            "child7",
            "child8",
        ]
        assert _link_windows(response.headers["Link"]) == {
            "prev": (3, 3),
            "next": (3, 9),
        }

    def test_link_locator_reuses_request_path(self, auth_client, root):
        response = auth_client.get(
            f"/organization/{root['id']}/organizations?maxItems=3&skipCount=6"
        )

        path = f"http://localhost/organization/{root['id']}/organizations"
        assert response.headers["Link"].startswith(
            f'<{path}?maxItems=3&skipCount=3>; rel="prev"'
        )

    def test_default_window_returns_everything(self, auth_client, root):
        response = auth_client.get(f"/organization/{root['id']}/organizations")

        assert len(response.get_json()) == 10
        assert "Link" not in response.headers

    def test_every_item_is_link_enriched(self, auth_client, root):
        response = auth_client.get(f"/organization/{root['id']}/organizations")

        assert all(org["links"][0]["rel"] == "self" for org in response.get_json())

    @pytest.mark.parametrize(
        "query",
        [
            "maxItems=-1",
            "skipCount=-1",
            "maxItems=abc",
            "maxItems=1_0",
            "maxItems=%2B10",
            "maxItems=99999999999999999999999",
            "skipCount=2147483648",
        ],
    )
    def test_invalid_window_is_400(self, auth_client, root, query):
        response = auth_client.get(f"/organization/{root['id']}/organizations?{query}")

        assert response.status_code == 400

    def test_unknown_parent_is_an_empty_list(self, auth_client):
        response = auth_client.get("/organization/organizationmissing/organizations")

        assert response.status_code == 200
        assert response.get_json() == []


class TestUserOrganizations:

    def test_defaults_to_current_user(self, auth_client):
        _create(auth_client, "acme")
        _create(auth_client, "globex")

        implicit = auth_client.get("/organization")
        explicit = auth_client.get("/organization?user=alice")

        assert implicit.status_code == 200
        assert implicit.get_json() == explicit.get_json()
        assert [org["name"] for org in implicit.get_json()] == ["acme", "globex"]

    def test_other_user_has_no_organizations(self, auth_client):
        _create(auth_client, "acme")

        response = auth_client.get("/organization?user=bob")

        assert response.get_json() == []

    def test_pagination_keeps_user_param(self, auth_client):
        for n in range(5):
            _create(auth_client, f"org{n}")

        response = auth_client.get("/organization?user=alice&maxItems=2&skipCount=0")

        assert len(response.get_json()) == 2
        assert response.headers["Link"] == (
            "<http://localhost/organization?user=alice&maxItems=2&skipCount=2>; "
            'rel="next"'
        )

    def test_negative_max_items_is_400(self, auth_client):
        response = auth_client.get("/organization?maxItems=-3")

        assert response.status_code == 400
        assert "can't be negative" in response.get_json()["message"]

    @pytest.mark.parametrize(
        "query",
        ["maxItems=99999999999999999999999", "skipCount=99999999999999999999999"],
    )
    def test_oversized_window_is_400(self, auth_client, query):
        response = auth_client.get(f"/organization?{query}")

        assert response.status_code == 400
        assert "must be between" in response.get_json()["message"]

    def test_underscored_number_is_400(self, auth_client):
        response = auth_client.get("/organization?maxItems=1_0")

        assert response.status_code == 400


class TestMembers:

    def test_creator_is_listed(self, auth_client):
        acme = _create(auth_client, "acme")

        response = auth_client.get(f"/organization/{acme['id']}/members")

        assert response.status_code == 200
        members = response.get_json()
        assert [member["userId"] for member in members] == ["alice"]
        assert "update" in members[0]["actions"]

    def test_members_of_unknown_organization_is_404(self, auth_client):
        response = auth_client.get("/organization/organizationmissing/members")

        assert response.status_code == 404


class TestUnknownRoutes:

    def test_unknown_route_is_json_404(self, auth_client):
        response = auth_client.get("/nowhere")

        assert response.status_code == 404
        assert response.get_json()["status"] == 404

    def test_wrong_method_is_json_405(self, auth_client):
        response = auth_client.put("/organization")

        assert response.status_code == 405
