"""
Organization blueprint — the ``/organization`` REST resource.
"""

from flask import Blueprint

bp = Blueprint("organization", __name__)

# Import routes after blueprint creation to avoid circular imports.
from orgapi.blueprints.organization import routes  # noqa: E402, F401
