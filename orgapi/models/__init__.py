"""
Model package — imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` commands are run.

  - organization.py -> organization and member tables
  - user.py         -> application users (Flask-Login)
  - audit.py        -> audit trail of organization changes
"""

from orgapi.models.organization import Member, Organization  # noqa: F401
from orgapi.models.user import User  # noqa: F401
from orgapi.models.audit import AuditLog  # noqa: F401
