"""
Smoke tests for the main blueprint routes.

These verify that the application starts up correctly and the index
and health check endpoints respond.
"""


class TestIndex:
    """Tests for the service index."""

    def test_index_returns_200(self, client):
        """The index is public and answers with JSON."""
        response = client.get("/")
        assert response.status_code == 200
        assert response.get_json()["service"] == "orgapi"

    def test_index_links_to_organizations(self, client):
        response = client.get("/")
        links = {link["rel"]: link["href"] for link in response.get_json()["links"]}
        assert links["organizations"] == "http://localhost/organization"
        assert links["health"] == "http://localhost/health"


class TestHealthCheck:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self, client):
        """The health check should report a reachable database."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy", "database": "connected"}
