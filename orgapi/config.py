"""
Configuration for the Organization API.

One class per deployment environment; ``create_app`` picks the class
named by its argument or by ``FLASK_ENV``.  Anything secret or
host-specific comes from the environment.  Development runs against a
local SQLite file, production expects ``DATABASE_URL`` to name a real
database server (PostgreSQL, SQL Server, ...).
"""

import logging
import os

_logger = logging.getLogger(__name__)

# Placeholder key; production startup fails while it is still in use.
_INSECURE_SECRET_KEY = "dev-secret-change-me"


def _env_flag(name: str, default: bool) -> bool:
    """Read a ``true``/``false`` environment variable."""
    return os.environ.get(name, str(default)).strip().lower() == "true"


def _split_env_list(name: str, default: str) -> list[str]:
    """Read a comma-separated environment variable as a list of strings."""
    return [
        item.strip()
        for item in os.environ.get(name, default).split(",")
        if item.strip()
    ]


class BaseConfig:
    """
    Settings common to every environment.
    """

    SECRET_KEY: str = os.environ.get("SECRET_KEY", _INSECURE_SECRET_KEY)

    # -- Session cookie ----------------------------------------------------
    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = "Lax"
    SESSION_COOKIE_SECURE: bool = False
    PERMANENT_SESSION_LIFETIME: int = int(
        os.environ.get("SESSION_LIFETIME_SECONDS", "3600")
    )

    # -- CSRF --------------------------------------------------------------
    # API clients fetch one token per session from /auth/csrf-token.
    WTF_CSRF_TIME_LIMIT: int | None = None

    # -- Database ----------------------------------------------------------
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL", "sqlite:///orgapi-dev.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ECHO: bool = False

    # -- Organization rules ------------------------------------------------
    # Page size used when a list request omits ``maxItems``.
    PAGINATION_MAX_ITEMS: int = int(os.environ.get("PAGINATION_MAX_ITEMS", "30"))

    MAX_ORGANIZATION_NAME_LENGTH: int = int(
        os.environ.get("MAX_ORGANIZATION_NAME_LENGTH", "20")
    )

    # Names that would shadow a route segment or confuse clients.
    RESERVED_ORGANIZATION_NAMES: list[str] = _split_env_list(
        "RESERVED_ORGANIZATION_NAMES", "find,organization,organizations,api"
    )

    # ``POST /auth/dev-login`` answers 404 unless this is on.
    DEV_LOGIN_ENABLED: bool = _env_flag("DEV_LOGIN_ENABLED", False)

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def validate_production_secrets(cls, app_config: dict) -> None:
        """
        Refuse to start production with development-grade settings.

        The factory runs this for the ``production`` config only.
        Problems that would compromise the deployment raise; questionable
        but survivable settings are logged.

        Args:
            app_config: ``app.config`` after the config class was loaded.

        Raises:
            RuntimeError: Listing every setting that must be fixed.
        """
        problems: list[str] = []

        if app_config.get("SECRET_KEY") == _INSECURE_SECRET_KEY:
            problems.append(
                "SECRET_KEY is unset; export a long random value, e.g. "
                "the output of secrets.token_hex(32)."
            )

        db_uri = app_config.get("SQLALCHEMY_DATABASE_URI", "")
        if not db_uri or db_uri.startswith("sqlite"):
            problems.append(
                "DATABASE_URL must point at a database server in production "
                "(SQLite does not handle concurrent writers)."
            )

        if app_config.get("DEV_LOGIN_ENABLED"):
            problems.append("DEV_LOGIN_ENABLED must be false in production.")

        if problems:
            details = "\n  - ".join(problems)
            raise RuntimeError(f"Unsafe production configuration:\n  - {details}")

        if app_config.get("LOG_LEVEL", "").upper() == "DEBUG":
            _logger.warning(
                "Production is logging at DEBUG; request details and SQL "
                "may end up in the logs."
            )


class DevelopmentConfig(BaseConfig):
    """
    Local development: debug mode, echoed SQL, dev login on unless
    ``DEV_LOGIN_ENABLED=false``.
    """

    DEBUG: bool = True
    SQLALCHEMY_ECHO: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")
    DEV_LOGIN_ENABLED: bool = _env_flag("DEV_LOGIN_ENABLED", True)


class TestingConfig(BaseConfig):
    """
    Test runs: a private in-memory SQLite database per app.

    CSRF checks are off so tests can POST without fetching a token.
    """

    TESTING: bool = True
    WTF_CSRF_ENABLED: bool = False
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    LOG_LEVEL: str = "DEBUG"
    DEV_LOGIN_ENABLED: bool = True


class ProductionConfig(BaseConfig):
    """
    Production: secure cookies, quiet logs, no dev login.

    ``validate_production_secrets`` is run at startup.
    """

    DEBUG: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")
    SESSION_COOKIE_SECURE: bool = True
    DEV_LOGIN_ENABLED: bool = False


config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
