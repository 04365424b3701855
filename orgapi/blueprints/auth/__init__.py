"""
Auth blueprint — session login/logout for API clients.
"""

from flask import Blueprint

bp = Blueprint("auth", __name__)

# Import routes after blueprint creation to avoid circular imports.
from orgapi.blueprints.auth import routes  # noqa: E402, F401
