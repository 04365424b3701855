"""
Audit trail for organization changes and session events.

The organization manager reports each create, update and delete here;
the auth blueprint reports logins and logouts.  Entries are added to
the current SQLAlchemy session and are committed by the caller, so an
entry exists exactly when the change it describes was committed.
"""

import json
import logging
from typing import Any

from flask import has_request_context, request

from orgapi.extensions import db
from orgapi.models.audit import AuditLog

logger = logging.getLogger(__name__)

_USER_AGENT_MAX_LENGTH = 500


def _as_json(value: dict[str, Any] | None) -> str | None:
    return json.dumps(value) if value else None


def log_change(
    user_id: str | None,
    action_type: str,
    entity_type: str,
    entity_id: str | None,
    previous_value: dict[str, Any] | None = None,
    new_value: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Stage an audit entry in the caller's transaction.

    Args:
        user_id:        Acting user; ``None`` for CLI and other system work.
        action_type:    CREATE, UPDATE, DELETE, LOGIN or LOGOUT.
        entity_type:    Kind of record touched, e.g. ``organization``.
        entity_id:      Key of the record touched.
        previous_value: State before the change (changed fields only
                        for updates).
        new_value:      State after the change.
    """
    ip_address = user_agent = None
    if has_request_context():
        ip_address = request.remote_addr
        user_agent = str(request.user_agent)[:_USER_AGENT_MAX_LENGTH]

    entry = AuditLog(
        user_id=user_id,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        previous_value=_as_json(previous_value),
        new_value=_as_json(new_value),
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.session.add(entry)

    logger.info(
        "Audit %s on %s %s (user=%s)", action_type, entity_type, entity_id, user_id
    )
    return entry


def log_login(user_id: str) -> AuditLog:
    return log_change(user_id, "LOGIN", "user", user_id)


def log_logout(user_id: str) -> AuditLog:
    return log_change(user_id, "LOGOUT", "user", user_id)
