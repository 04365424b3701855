"""
Unbound Flask extension objects.

Models and services import these directly; ``create_app`` binds them to
an application with ``init_app``.
"""

from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

db = SQLAlchemy()

# ``flask db upgrade`` applies the scripts under ``migrations/``.
migrate = Migrate()

# No ``login_view``: unauthenticated API calls get a JSON 401 from the
# handler registered in ``create_app``.
login_manager = LoginManager()

# Session-cookie clients send the token from ``/auth/csrf-token`` in an
# ``X-CSRFToken`` header on POST and DELETE.
csrf = CSRFProtect()
