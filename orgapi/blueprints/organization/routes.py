"""
Routes for the organization blueprint.

Routes only translate HTTP to service calls: they read path, query and
body, build the ``ServiceContext``, call ``OrganizationService`` and
turn its ``ApiResponse`` into a Flask response.  Validation, status
selection and link enrichment all happen in the service; errors are
rendered by the handlers registered in the application factory.

    POST   /organization                         create             201
    POST   /organization/<id>                    update             200
    DELETE /organization/<id>                    remove             204
    GET    /organization/<id>                    get_by_id          200
    GET    /organization/find?name=              find               200
    GET    /organization/<parent>/organizations  get_by_parent      200 + Link
    GET    /organization?user=                   get_organizations  200 + Link
    GET    /organization/<id>/members            get_members        200 + Link
"""

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from orgapi.blueprints.organization import bp
from orgapi.context import ServiceContext
from orgapi.pagination import MAX_ITEMS_PARAM, SKIP_COUNT_PARAM
from orgapi.services.organization_service import ApiResponse, OrganizationService
from orgapi.validation import int_arg


def _service() -> OrganizationService:
    """Return the service instance wired up by the application factory."""
    return current_app.extensions["organization_service"]


def _context() -> ServiceContext:
    return ServiceContext.from_request(request, current_user)


def _window_args() -> dict:
    """Parse ``maxItems``/``skipCount``; omitted values use the service defaults."""
    return {
        "max_items": int_arg(request.args, MAX_ITEMS_PARAM, None),
        "skip_count": int_arg(request.args, SKIP_COUNT_PARAM, None),
    }


def _respond(result: ApiResponse):
    """Convert a service result into a Flask response tuple."""
    if result.body is None:
        return "", result.status, result.headers
    return jsonify(result.body), result.status, result.headers


# =========================================================================
# Single organizations
# =========================================================================


@bp.route("", methods=["POST"])
@login_required
def create():
    """Create a new organization."""
    body = request.get_json(silent=True)
    return _respond(_service().create(body, _context()))


@bp.route("/<organization_id>", methods=["POST"])
@login_required
def update(organization_id):
    """Update the organization addressed by the path id."""
    body = request.get_json(silent=True)
    return _respond(_service().update(organization_id, body, _context()))


@bp.route("/<organization_id>", methods=["DELETE"])
@login_required
def remove(organization_id):
    """Remove an organization; unknown ids still answer 204."""
    return _respond(_service().remove(organization_id, _context()))


@bp.route("/<organization_id>", methods=["GET"])
@login_required
def get_by_id(organization_id):
    return _respond(_service().get_by_id(organization_id, _context()))


@bp.route("/find", methods=["GET"])
@login_required
def find():
    """Find an organization by qualified name (``?name=parent/child``)."""
    return _respond(_service().find(request.args.get("name"), _context()))


# =========================================================================
# Lists (paginated, with a ``Link`` navigation header)
# =========================================================================


@bp.route("/<parent_id>/organizations", methods=["GET"])
@login_required
def get_by_parent(parent_id):
    """List child organizations of ``parent_id``."""
    return _respond(
        _service().get_by_parent(parent_id, _context(), **_window_args())
    )


@bp.route("", methods=["GET"])
@login_required
def get_organizations():
    """
    List the organizations of ``?user=``, or of the current user when
    the parameter is missing.
    """
    user_id = request.args.get("user") or None
    return _respond(
        _service().get_organizations(_context(), user_id=user_id, **_window_args())
    )


@bp.route("/<organization_id>/members", methods=["GET"])
@login_required
def get_members(organization_id):
    """List the members of an organization."""
    return _respond(
        _service().get_members(organization_id, _context(), **_window_args())
    )
