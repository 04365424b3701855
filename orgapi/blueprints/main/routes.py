"""
Routes for the main blueprint — service index and health check.
"""

from flask import url_for
from sqlalchemy import text

from orgapi.blueprints.main import bp
from orgapi.extensions import db


@bp.route("/")
def index():
    """Entry point listing the top-level resources."""
    return {
        "service": "orgapi",
        "links": [
            {
                "rel": "organizations",
                "href": url_for("organization.get_organizations", _external=True),
                "method": "GET",
            },
            {
                "rel": "health",
                "href": url_for("main.health_check", _external=True),
                "method": "GET",
            },
        ],
    }


@bp.route("/health")
def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 if the app is running and can reach the database.
    """
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}, 200
    except Exception as exc:  # pylint: disable=broad-except
        db.session.rollback()
        return {"status": "unhealthy", "database": str(exc)}, 503
