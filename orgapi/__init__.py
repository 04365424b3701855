"""
Organization API package and its application factory.

    from orgapi import create_app

    app = create_app("testing")

``flask --app orgapi run`` and ``wsgi.py`` call the factory without an
argument, which selects the configuration from ``FLASK_ENV``.
"""

import logging
import os

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .cli import register_commands
from .config import config_by_name
from .errors import ApiError
from .extensions import csrf, db, login_manager, migrate

logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """
    Build the API application.

    Args:
        config_name: Key of ``config_by_name``; when omitted, ``FLASK_ENV``
                     decides and ``development`` is the fallback.

    Raises:
        ValueError: ``config_name`` names no configuration.
    """
    name = config_name or os.environ.get("FLASK_ENV", "development")
    try:
        config_class = config_by_name[name]
    except KeyError:
        raise ValueError(
            f"No configuration named {name!r}; choose from {sorted(config_by_name)}"
        ) from None

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Keep response keys in the order the service builds them.
    app.json.sort_keys = False

    if name == "production":
        config_class.validate_production_secrets(app.config)

    _configure_logging(app)
    _register_extensions(app)
    _register_services(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    register_commands(app)

    return app


def _register_extensions(app: Flask) -> None:
    """Attach the database, migrations, session and CSRF extensions."""
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    from .models.user import User  # pylint: disable=import-outside-toplevel

    @login_manager.user_loader
    def load_user(user_id: str):
        """Restore the session user; deactivated users are signed out."""
        user = db.session.get(User, user_id)
        if user is None or not user.is_active:
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        """Answer unauthenticated API calls with JSON instead of a redirect."""
        return jsonify({"message": "Authentication required", "status": 401}), 401


def _register_services(app: Flask) -> None:
    """
    Build the organization service with its collaborators.

    One instance serves every request; it holds no per-request state.
    """
    # pylint: disable=import-outside-toplevel
    from .services.links_injector import OrganizationLinksInjector
    from .services.organization_manager import OrganizationManager
    from .services.organization_service import OrganizationService
    from .services.organization_validator import OrganizationValidator

    validator = OrganizationValidator(
        reserved_names=app.config["RESERVED_ORGANIZATION_NAMES"],
        max_name_length=app.config["MAX_ORGANIZATION_NAME_LENGTH"],
    )
    app.extensions["organization_service"] = OrganizationService(
        manager=OrganizationManager(),
        validator=validator,
        links_injector=OrganizationLinksInjector(),
        default_max_items=app.config["PAGINATION_MAX_ITEMS"],
    )


def _register_blueprints(app: Flask) -> None:
    """Mount the index, session and organization blueprints."""
    # pylint: disable=import-outside-toplevel
    from .blueprints.auth import bp as auth_bp
    from .blueprints.main import bp as main_bp
    from .blueprints.organization import bp as organization_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(organization_bp, url_prefix="/organization")


def _register_error_handlers(app: Flask) -> None:
    """Render every failure as a JSON body with the matching status."""

    @app.errorhandler(ApiError)
    def api_error(error: ApiError):
        """Handle errors raised by the validation gateway and services."""
        if error.status_code >= 500:
            logger.error(
                "%s %s failed: %s", request.method, request.path, error.message
            )
        else:
            logger.warning(
                "%s %s -> %d: %s",
                request.method,
                request.path,
                error.status_code,
                error.message,
            )
        return jsonify(error.to_response()), error.status_code

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        """Handle werkzeug errors (unknown route, wrong method, CSRF, ...)."""
        return (
            jsonify({"message": error.description, "status": error.code}),
            error.code,
        )

    @app.errorhandler(Exception)
    def internal_error(error: Exception):
        """Handle anything unexpected without leaking internals."""
        logger.exception("Unhandled exception on %s %s", request.method, request.path)
        db.session.rollback()
        return (
            jsonify({"message": "Internal server error occurred", "status": 500}),
            500,
        )


def _configure_logging(app: Flask) -> None:
    """
    Configure root logging at ``LOG_LEVEL``.

    In debug mode the SQLAlchemy engine logger stays at WARNING so
    echoed SQL does not bury application messages.
    """
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

    if app.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
