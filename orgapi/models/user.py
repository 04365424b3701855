"""
Application user model.

Authentication mechanics live outside this service; the table only
records who may hold a session so Flask-Login can restore the caller's
identity on each request.
"""

from flask_login import UserMixin

from orgapi.extensions import db


class User(UserMixin, db.Model):
    """
    Application user record.

    Inherits from ``UserMixin`` to satisfy Flask-Login requirements
    (``is_authenticated``, ``is_active``, ``get_id``).  ``id`` is the
    identity-provider subject and is what organization memberships
    reference.
    """

    __tablename__ = "user"

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(200), unique=True, nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.current_timestamp()
    )

    @property
    def full_name(self) -> str:
        """Return the user's full display name."""
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.full_name,
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"
