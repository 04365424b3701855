"""
Organization manager — persistence of organizations and memberships.

This is the domain layer behind the organization API.  It owns every
rule that needs the database to decide: identifier generation, name
uniqueness (via the qualified name), parent existence, the no-cycle
rule for re-parenting, and cascading removal of sub-organizations.

Storage failures never leak as SQLAlchemy exceptions; they surface as
``ServerError`` (or ``ConflictError`` for a uniqueness race lost at
commit time) after the session has been rolled back.
"""

import logging
import secrets
import string
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from orgapi.errors import ConflictError, NotFoundError, ServerError
from orgapi.extensions import db
from orgapi.models.organization import Member, Organization
from orgapi.pagination import Page
from orgapi.services import audit_service

logger = logging.getLogger(__name__)

ENTITY_TYPE = "organization"

# Actions granted to the creator of an organization.
ALL_ACTIONS = (
    "update",
    "delete",
    "set_permissions",
    "manage_suborganizations",
    "manage_resources",
)

_ID_PREFIX = "organization"
_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_RANDOM_LENGTH = 16


def generate_organization_id() -> str:
    """Return a new identifier such as ``organizationk3v9x0q2m1c7a8zt``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_RANDOM_LENGTH))
    return _ID_PREFIX + suffix


def build_qualified_name(parent: Organization | None, name: str) -> str:
    """Return ``parent/qualified/name`` for a child, or ``name`` for a root."""
    if parent is None:
        return name
    return f"{parent.qualified_name}/{name}"


def _storage_errors(func):
    """
    Translate SQLAlchemy failures into API errors.

    The session is rolled back first so the next request starts clean.
    Errors already raised as ``ApiError`` pass through untouched.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IntegrityError as exc:
            db.session.rollback()
            logger.warning("Integrity error in %s: %s", func.__name__, exc.orig)
            raise ConflictError(
                "Conflict error occurred, the organization name may already be taken"
            ) from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Storage failure in %s", func.__name__)
            raise ServerError("Internal server error occurred") from exc

    return wrapper


class OrganizationManager:
    """
    SQLAlchemy-backed organization manager.

    Stateless: every method works on the Flask-SQLAlchemy scoped session
    of the current application context, so one instance serves all
    requests.
    """

    # -- Mutations ---------------------------------------------------------

    @_storage_errors
    def create(self, representation: dict, creator_id: str | None = None) -> Organization:
        """
        Create an organization from a validated representation.

        Args:
            representation: Dict with ``name`` and optional ``parent`` id.
                            Any ``id`` in it is ignored.
            creator_id:     When given, the user becomes a member with
                            every action.

        Raises:
            NotFoundError: The parent organization does not exist.
            ConflictError: The qualified name is already taken.
        """
        name = representation["name"]
        parent = self._resolve_parent(representation.get("parent"))
        qualified_name = build_qualified_name(parent, name)
        self._check_name_available(qualified_name, name)

        organization = Organization(
            id=generate_organization_id(),
            name=name,
            qualified_name=qualified_name,
            parent_id=parent.id if parent is not None else None,
        )
        db.session.add(organization)

        if creator_id is not None:
            db.session.add(
                Member(
                    user_id=creator_id,
                    organization_id=organization.id,
                    actions=",".join(ALL_ACTIONS),
                )
            )

        audit_service.log_change(
            user_id=creator_id,
            action_type="CREATE",
            entity_type=ENTITY_TYPE,
            entity_id=organization.id,
            new_value=organization.to_dict(),
        )
        db.session.commit()

        logger.info(
            "Created organization %s (%s)", organization.id, organization.qualified_name
        )
        return organization

    @_storage_errors
    def update(
        self,
        organization_id: str,
        representation: dict,
        user_id: str | None = None,
    ) -> Organization:
        """
        Rename and/or move an organization.

        ``name`` defaults to the current name.  ``parent`` is only
        changed when the key is present; ``None`` turns the organization
        into a root.  Qualified names of all descendants are rewritten.

        Raises:
            NotFoundError: The organization or the new parent is unknown.
            ConflictError: The new qualified name is taken, or the move
                           would make the organization its own ancestor.
        """
        organization = self.get_by_id(organization_id)

        name = representation.get("name") or organization.name
        parent = organization.parent
        if "parent" in representation and representation["parent"] != organization.parent_id:
            parent = self._resolve_parent(representation["parent"])
            self._check_not_descendant(organization, parent)

        qualified_name = build_qualified_name(parent, name)
        if qualified_name != organization.qualified_name:
            self._check_name_available(qualified_name, name)

        previous = {}
        changed = {}
        if name != organization.name:
            previous["name"] = organization.name
            changed["name"] = name
        new_parent_id = parent.id if parent is not None else None
        if new_parent_id != organization.parent_id:
            previous["parent"] = organization.parent_id
            changed["parent"] = new_parent_id

        if not changed:
            return organization

        organization.name = name
        organization.parent_id = new_parent_id
        organization.parent = parent
        organization.qualified_name = qualified_name
        self._rewrite_descendant_names(organization)

        audit_service.log_change(
            user_id=user_id,
            action_type="UPDATE",
            entity_type=ENTITY_TYPE,
            entity_id=organization.id,
            previous_value=previous,
            new_value=changed,
        )
        db.session.commit()

        logger.info(
            "Updated organization %s -> %s", organization.id, organization.qualified_name
        )
        return organization

    @_storage_errors
    def remove(self, organization_id: str, user_id: str | None = None) -> None:
        """
        Remove an organization together with all its sub-organizations.

        Descendants are removed before their parents and memberships go
        with them.  Removing an unknown id is not an error.
        """
        organization = db.session.get(Organization, organization_id)
        if organization is None:
            logger.debug("Remove of unknown organization %s ignored", organization_id)
            return

        for doomed in self._descendants_post_order(organization):
            Member.query.filter_by(organization_id=doomed.id).delete(
                synchronize_session=False
            )
            audit_service.log_change(
                user_id=user_id,
                action_type="DELETE",
                entity_type=ENTITY_TYPE,
                entity_id=doomed.id,
                previous_value=doomed.to_dict(),
            )
            db.session.delete(doomed)
            # Children must be gone before the parent row is deleted.
            db.session.flush()

        db.session.commit()
        logger.info("Removed organization %s", organization_id)

    @_storage_errors
    def add_member(
        self, organization_id: str, user_id: str, actions: list[str] | tuple[str, ...]
    ) -> Member:
        """
        Grant ``user_id`` membership with ``actions``, replacing any
        previously granted actions.
        """
        organization = self.get_by_id(organization_id)
        member = Member.query.filter_by(
            organization_id=organization.id, user_id=user_id
        ).first()
        if member is None:
            member = Member(organization_id=organization.id, user_id=user_id)
            db.session.add(member)
        member.actions = ",".join(actions)
        db.session.commit()
        return member

    # -- Lookups -----------------------------------------------------------

    @_storage_errors
    def get_by_id(self, organization_id: str) -> Organization:
        """Raises ``NotFoundError`` when no organization has this id."""
        organization = db.session.get(Organization, organization_id)
        if organization is None:
            raise NotFoundError(
                f"Organization with id '{organization_id}' doesn't exist"
            )
        return organization

    @_storage_errors
    def get_by_name(self, qualified_name: str) -> Organization:
        """
        Look up an organization by its qualified name
        (``parent/child`` for sub-organizations).

        Raises ``NotFoundError`` when no organization has this name.
        """
        organization = Organization.query.filter_by(
            qualified_name=qualified_name
        ).first()
        if organization is None:
            raise NotFoundError(
                f"Organization with name '{qualified_name}' doesn't exist"
            )
        return organization

    @_storage_errors
    def get_by_parent(
        self, parent_id: str, max_items: int, skip_count: int
    ) -> Page[Organization]:
        """Return one page of the direct children of ``parent_id``."""
        query = Organization.query.filter(
            Organization.parent_id == parent_id
        ).order_by(Organization.qualified_name)
        return self._page(query, max_items, skip_count)

    @_storage_errors
    def get_by_member(
        self, user_id: str, max_items: int, skip_count: int
    ) -> Page[Organization]:
        """Return one page of the organizations ``user_id`` belongs to."""
        query = (
            Organization.query.join(Member, Member.organization_id == Organization.id)
            .filter(Member.user_id == user_id)
            .order_by(Organization.qualified_name)
        )
        return self._page(query, max_items, skip_count)

    @_storage_errors
    def get_members(
        self, organization_id: str, max_items: int, skip_count: int
    ) -> Page[Member]:
        """
        Return one page of the members of an organization.

        Raises ``NotFoundError`` when the organization does not exist.
        """
        organization = self.get_by_id(organization_id)
        query = Member.query.filter(
            Member.organization_id == organization.id
        ).order_by(Member.user_id)
        return self._page(query, max_items, skip_count)

    # -- Helpers -----------------------------------------------------------

    @staticmethod
    def _page(query, max_items: int, skip_count: int) -> Page[Organization]:
        # Count and fetch run in the same session transaction.
        total_count = query.order_by(None).count()
        items = query.offset(skip_count).limit(max_items).all() if max_items else []
        return Page(
            items=items,
            skip_count=skip_count,
            max_items=max_items,
            total_count=total_count,
        )

    @staticmethod
    def _resolve_parent(parent_id: str | None) -> Organization | None:
        if parent_id is None:
            return None
        parent = db.session.get(Organization, parent_id)
        if parent is None:
            raise NotFoundError(
                f"Parent organization with id '{parent_id}' doesn't exist"
            )
        return parent

    @staticmethod
    def _check_name_available(qualified_name: str, name: str) -> None:
        exists = (
            db.session.query(Organization.id)
            .filter(Organization.qualified_name == qualified_name)
            .first()
        )
        if exists is not None:
            raise ConflictError(f"Organization with name '{name}' already exists")

    @staticmethod
    def _check_not_descendant(
        organization: Organization, new_parent: Organization | None
    ) -> None:
        ancestor = new_parent
        while ancestor is not None:
            if ancestor.id == organization.id:
                raise ConflictError(
                    "An organization can't be moved under itself or one of "
                    "its sub-organizations"
                )
            ancestor = ancestor.parent

    @staticmethod
    def _rewrite_descendant_names(organization: Organization) -> None:
        pending = [organization]
        while pending:
            current = pending.pop()
            for child in current.children:
                child.qualified_name = build_qualified_name(current, child.name)
                pending.append(child)

    @staticmethod
    def _descendants_post_order(organization: Organization) -> list[Organization]:
        ordered: list[Organization] = []
        stack: list[tuple[Organization, bool]] = [(organization, False)]
        while stack:
            current, expanded = stack.pop()
            if expanded:
                ordered.append(current)
                continue
            stack.append((current, True))
            for child in current.children:
                stack.append((child, False))
        return ordered
