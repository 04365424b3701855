"""
Routes for the auth blueprint — session identity for API clients.

The organization API identifies its caller through the Flask-Login
session.  Real sign-in is handled by the identity provider in front of
the service; for local development and tests ``/auth/dev-login`` starts
a session for an existing user without any credentials.  It is only
available when ``DEV_LOGIN_ENABLED`` is set.
"""

from datetime import datetime, timezone

from flask import current_app, request
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from orgapi.blueprints.auth import bp
from orgapi.errors import BadRequestError, NotFoundError
from orgapi.extensions import csrf, db
from orgapi.services import audit_service


@bp.route("/dev-login", methods=["POST"])
@csrf.exempt
def dev_login():
    """
    Development-only login bypass.

    Expects ``{"user_id": "..."}`` (JSON body) or ``?user_id=``.  Returns
    404 when the feature is disabled so production does not advertise it.
    """
    if not current_app.config.get("DEV_LOGIN_ENABLED"):
        raise NotFoundError("Development login is not enabled")

    # Import models inside the route to avoid circular imports.
    from orgapi.models.user import User  # pylint: disable=import-outside-toplevel

    body = request.get_json(silent=True) or {}
    user_id = body.get("user_id") or request.args.get("user_id")
    if not user_id:
        raise BadRequestError("Missed user's id")

    target_user = User.query.filter(
        User.id == user_id,
        User.is_active == True,  # pylint: disable=singleton-comparison
    ).first()
    if target_user is None:
        raise NotFoundError(f"No active user found with id '{user_id}'")

    login_user(target_user)
    target_user.last_login = datetime.now(timezone.utc)
    audit_service.log_login(target_user.id)
    db.session.commit()

    current_app.logger.info("Dev login: signed in as %s", target_user.id)
    return target_user.to_dict(), 200


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    """End the current session."""
    audit_service.log_logout(current_user.id)
    db.session.commit()
    logout_user()
    return "", 204


@bp.route("/me", methods=["GET"])
@login_required
def me():
    """Return the authenticated caller."""
    return current_user.to_dict(), 200


@bp.route("/csrf-token", methods=["GET"])
def csrf_token():
    """
    Hand out a CSRF token for this session.

    Clients send it back in the ``X-CSRFToken`` header on POST and
    DELETE requests.
    """
    return {"csrfToken": generate_csrf()}, 200
