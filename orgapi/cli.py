"""
Custom Flask CLI commands.

These commands are registered with the app by ``register_commands()`` in
the application factory. Run them with ``flask <command_name>``.

Usage::

    flask db-check                      # Verify connectivity and tables
    flask create-user ID EMAIL          # Add a user who can hold a session
    flask seed-dev                      # Dev user plus a sample org tree
"""

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect

from orgapi.errors import NotFoundError
from orgapi.extensions import db

# Tables the application expects; created by ``flask db upgrade``.
_EXPECTED_TABLES = ("organization", "member", "user", "audit_log")

# -- Default values for the dev user ---------------------------------------
_DEFAULT_DEV_USER_ID = "dev-user"
_DEFAULT_DEV_EMAIL = "dev.user@localhost"

# Sample tree created by ``flask seed-dev``: (name, parent name).
_SAMPLE_ORGANIZATIONS = (
    ("acme", None),
    ("research", "acme"),
    ("engineering", "acme"),
    ("platform", "engineering"),
)


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify database connectivity and confirm the expected tables exist.
    """
    click.echo("=" * 60)
    click.echo("  Organization API — Database Connectivity Check")
    click.echo("=" * 60)

    # Show the connection string with any password masked.
    db_uri = db.engine.url.render_as_string(hide_password=True)
    click.echo(f"\n  Connection string: {db_uri}\n")

    # -- Step 1: Basic connectivity ----------------------------------------
    click.echo("[1/2] Testing connection...")
    try:
        row = db.session.execute(db.text("SELECT 1 AS connected")).fetchone()
    except Exception as exc:  # pylint: disable=broad-exception-caught
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        click.echo("\n  Is DATABASE_URL in your environment correct?")
        return
    if row is None or row[0] != 1:
        click.secho("      ✗ Unexpected result from test query.", fg="red")
        return
    click.secho("      ✓ Connected successfully.", fg="green")

    # -- Step 2: Tables ----------------------------------------------------
    click.echo("[2/2] Checking tables...\n")
    existing = set(inspect(db.engine).get_table_names())
    missing = [table for table in _EXPECTED_TABLES if table not in existing]
    for table in _EXPECTED_TABLES:
        mark = "✗" if table in missing else "✓"
        click.echo(f"      {mark} {table}")

    if missing:
        click.secho(
            f"\n  Missing tables: {', '.join(missing)}. Run: flask db upgrade",
            fg="red",
        )
        return

    click.echo("\n" + "=" * 60)
    click.secho("  All checks passed. Database is ready.", fg="green", bold=True)
    click.echo("=" * 60)


@click.command("create-user")
@click.argument("user_id")
@click.argument("email")
@click.option("--first", "first_name", default="", help="First name.")
@click.option("--last", "last_name", default="", help="Last name.")
@with_appcontext
def create_user_command(user_id: str, email: str, first_name: str, last_name: str):
    """Create (or reactivate) the user USER_ID with address EMAIL."""
    user = _ensure_user(user_id, email, first_name, last_name)
    db.session.commit()
    click.secho(f"  ✓ User {user.id} ({user.email}) is active.", fg="green")


@click.command("seed-dev")
@click.option(
    "--user-id",
    default=_DEFAULT_DEV_USER_ID,
    show_default=True,
    help="Id of the development user.",
)
@with_appcontext
def seed_dev_command(user_id: str):
    """
    Create a development user and a small organization tree it belongs to.

    Existing organizations are left alone, so the command can be re-run.
    """
    service = current_app.extensions["organization_service"]
    manager = service.manager

    _ensure_user(user_id, _DEFAULT_DEV_EMAIL, "Dev", "User")
    db.session.commit()
    click.echo(f"  User: {user_id}")

    created = {}
    for name, parent_name in _SAMPLE_ORGANIZATIONS:
        parent = created.get(parent_name)
        qualified_name = name if parent is None else f"{parent.qualified_name}/{name}"
        try:
            organization = manager.get_by_name(qualified_name)
            click.echo(f"  = {organization.qualified_name} ({organization.id})")
        except NotFoundError:
            organization = manager.create(
                {"name": name, "parent": parent.id if parent else None},
                creator_id=user_id,
            )
            click.secho(
                f"  + {organization.qualified_name} ({organization.id})", fg="green"
            )
        created[name] = organization

    click.echo(f"\n  Sign in with: POST /auth/dev-login {{\"user_id\": \"{user_id}\"}}")


def _ensure_user(user_id: str, email: str, first_name: str, last_name: str):
    from orgapi.models.user import User  # pylint: disable=import-outside-toplevel

    user = db.session.get(User, user_id)
    if user is None:
        user = User(
            id=user_id,
            email=email,
            first_name=first_name or user_id,
            last_name=last_name,
        )
        db.session.add(user)
    user.is_active = True
    return user


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(db_check_command)
    app.cli.add_command(create_user_command)
    app.cli.add_command(seed_dev_command)
