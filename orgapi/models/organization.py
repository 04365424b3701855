"""
Organization structure models.

Organizations form a forest: each one optionally references a parent,
and ``qualified_name`` spells out the path from the root
(``acme/research/ml``).  The qualified name is unique, which makes a
plain ``name`` unique among siblings.
"""

from orgapi.extensions import db


class Organization(db.Model):
    """
    A named, optionally-parented organization.

    ``id`` is generated by the organization manager and never changes.
    ``qualified_name`` is derived from the parent chain and rewritten
    whenever an ancestor is renamed or the organization is moved.
    """

    __tablename__ = "organization"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    qualified_name = db.Column(db.String(1000), nullable=False, unique=True, index=True)
    parent_id = db.Column(
        db.String(64),
        db.ForeignKey("organization.id"),
        nullable=True,
        index=True,
    )
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.current_timestamp()
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.current_timestamp(),
        onupdate=db.func.current_timestamp(),
    )

    # -- Relationships -----------------------------------------------------
    parent = db.relationship(
        "Organization", remote_side=[id], back_populates="children"
    )
    children = db.relationship(
        "Organization", back_populates="parent", lazy="dynamic"
    )
    members = db.relationship(
        "Member",
        back_populates="organization",
        lazy="dynamic",
        passive_deletes=True,
    )

    def to_dict(self) -> dict:
        """Return the wire representation (links are added later)."""
        return {
            "id": self.id,
            "name": self.name,
            "qualifiedName": self.qualified_name,
            "parent": self.parent_id,
        }

    def __repr__(self) -> str:
        return f"<Organization {self.id}: {self.qualified_name}>"


class Member(db.Model):
    """
    Membership of a user in an organization.

    ``actions`` is a comma-separated list of the operations the member
    may perform on the organization (``update``, ``delete``, ...).
    ``user_id`` is the identity-provider id and is not a foreign key so
    that memberships can be granted before the user first signs in.
    """

    __tablename__ = "member"
    __table_args__ = (
        db.UniqueConstraint(
            "user_id",
            "organization_id",
            name="UQ_member_user_organization",
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    organization_id = db.Column(
        db.String(64),
        db.ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    actions = db.Column(db.String(500), nullable=False, default="")
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.current_timestamp()
    )

    # -- Relationships -----------------------------------------------------
    organization = db.relationship("Organization", back_populates="members")

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "organizationId": self.organization_id,
            "actions": self.action_list,
        }

    @property
    def action_list(self) -> list[str]:
        """Return the granted actions as a list."""
        return [action for action in self.actions.split(",") if action]

    def __repr__(self) -> str:
        return f"<Member {self.user_id} of {self.organization_id}>"
