"""
Audit logging model.

``AuditLog`` keeps who changed which organization, when, and from
where; session logins and logouts are recorded alongside.
"""

from orgapi.extensions import db


class AuditLog(db.Model):
    """
    One audited event.

    ``previous_value`` and ``new_value`` hold JSON text.  A CREATE only
    has the new organization, a DELETE only the removed one, and an
    UPDATE carries just the fields that changed on both sides.  LOGIN
    and LOGOUT rows have neither.
    """

    __tablename__ = "audit_log"
    __table_args__ = (
        db.CheckConstraint(
            "action_type IN ('CREATE', 'UPDATE', 'DELETE', 'LOGIN', 'LOGOUT')",
            name="CK_audit_log_action_type",
        ),
    )

    # SQLite only auto-increments INTEGER primary keys.
    id = db.Column(
        db.BigInteger().with_variant(db.Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    user_id = db.Column(db.String(64), nullable=True, index=True)
    action_type = db.Column(db.String(50), nullable=False)
    entity_type = db.Column(db.String(100), nullable=False)
    entity_id = db.Column(db.String(64), nullable=True)
    previous_value = db.Column(db.Text, nullable=True)
    new_value = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.current_timestamp()
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog {self.action_type} {self.entity_type}"
            f":{self.entity_id}>"
        )
