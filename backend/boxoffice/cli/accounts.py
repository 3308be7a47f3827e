"""Flask CLI commands for operator-managed accounts and token housekeeping."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import click
from flask import current_app
from flask.cli import with_appcontext

from boxoffice.models.account import AccountRole
from boxoffice.services._shared.errors import DuplicateAccount
from boxoffice.services._shared.ports import NewAccount

LOGGER = logging.getLogger(__name__)

# Self-registration always yields USER; these are the roles only operators grant.
PRIVILEGED_ROLES = (AccountRole.ORGANIZER.value, AccountRole.ADMIN.value)


@click.group("accounts")
def accounts_cli() -> None:
    """Manage privileged accounts and refresh tokens."""


@accounts_cli.command("create")
@click.option("--email", required=True)
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--role", type=click.Choice(PRIVILEGED_ROLES), default=AccountRole.ADMIN.value)
@click.password_option("--password")
@with_appcontext
def create_account(email: str, first_name: str, last_name: str, role: str, password: str) -> None:
    """Create an ORGANIZER or ADMIN account."""
    manager = current_app.extensions["session_manager"]
    min_length = manager.cfg.password_min_length
    if len(password) < min_length:
        raise click.BadParameter(
            f"must be at least {min_length} characters", param_hint="--password"
        )
    try:
        account = manager.users.create(
            NewAccount(
                email=email,
                password_hash=manager.hasher.hash(password),
                first_name=first_name,
                last_name=last_name,
                role=AccountRole(role),
            )
        )
    except DuplicateAccount as exc:
        raise click.ClickException(str(exc)) from exc
    LOGGER.info("accounts.create", extra={"account_id": account.id})
    click.echo(f"Created {account.role.value} account {account.id} <{account.email}>")


@accounts_cli.command("purge-tokens")
@with_appcontext
def purge_tokens() -> None:
    """Delete refresh tokens whose expiry has passed."""
    manager = current_app.extensions["session_manager"]
    removed = manager.refresh_tokens.purge_expired(datetime.now(UTC))
    click.echo(f"Purged {removed} expired refresh token(s)")
