"""
Maintenance commands registered on app.cli:
- expire-login-tokens [DAYS_OLD]       sweep login tokens not used for DAYS_OLD days
- expire-external-sessions [DAYS_OLD]  sweep external session mappings older than DAYS_OLD days
- list-login-tokens USER_ID            print a user's logins as JSON lines

The sweeps delete in batches until a batch comes back empty.
"""
from __future__ import annotations

import logging
import math
import time
from datetime import timedelta

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from models.schemas.login_token import LoginGroupOutSchema, LoginTokenOutSchema
from utils.security import utcnow

logger = logging.getLogger(__name__)

login_token_out_schema = LoginTokenOutSchema(many=True)
login_group_out_schema = LoginGroupOutSchema(many=True)


def run_expiration(service, label: str, days_old: float, min_days: float, batch_size: int, sleep_ms: int) -> int:
    """Call service.delete_expired() batch by batch; returns the total deleted."""
    if days_old < min_days:
        raise click.BadParameter(
            f"Expiration age must be at least {min_days:g} days.", param_hint="DAYS_OLD"
        )
    if not math.isfinite(days_old):
        raise click.BadParameter("Expiration age must be a finite number of days.", param_hint="DAYS_OLD")
    try:
        cutoff = utcnow() - timedelta(days=days_old)
    except (OverflowError, ValueError):
        raise click.BadParameter(f"Expiration age of {days_old:g} days is out of range.", param_hint="DAYS_OLD")
    total = 0
    while True:
        try:
            count = service.delete_expired(cutoff, batch_size)
        except SQLAlchemyError as e:
            logger.exception("Expiration of %s failed", label)
            raise click.ClickException(f"Database error while expiring {label}: {e}") from e
        if not count:
            break
        total += count
        logger.info("Deleted %d expired %s", count, label)
        click.echo(f"{count} expired {label} deleted.")
        if sleep_ms:
            time.sleep(sleep_ms / 1000)
    click.echo(f"{total} expired {label} deleted in total.")
    return total


def _sweep_options(fn):
    fn = click.option("--sleep", "sleep_ms", type=click.IntRange(min=0), default=None,
                      help="Milliseconds to wait between batches.")(fn)
    fn = click.option("--batch-size", type=click.IntRange(min=0), default=None,
                      help="Rows deleted per batch (0 for a single unlimited batch).")(fn)
    fn = click.argument("days_old", type=click.FloatRange(min=0), required=False)(fn)
    return fn


def _setting(value, key):
    return current_app.config[key] if value is None else value


@click.command("expire-login-tokens")
@_sweep_options
@with_appcontext
def expire_login_tokens(days_old, batch_size, sleep_ms):
    """Delete login tokens last used more than DAYS_OLD days ago."""
    run_expiration(
        current_app.extensions["login_tokens"],
        "login tokens",
        _setting(days_old, "LOGIN_TOKEN_EXPIRE_DAYS"),
        current_app.config["LOGIN_TOKEN_EXPIRE_MIN_DAYS"],
        _setting(batch_size, "EXPIRE_BATCH_SIZE"),
        _setting(sleep_ms, "EXPIRE_BATCH_SLEEP_MS"),
    )


@click.command("expire-external-sessions")
@_sweep_options
@with_appcontext
def expire_external_sessions(days_old, batch_size, sleep_ms):
    """Delete external session mappings created more than DAYS_OLD days ago."""
    run_expiration(
        current_app.extensions["external_sessions"],
        "external sessions",
        _setting(days_old, "EXTERNAL_SESSION_EXPIRE_DAYS"),
        current_app.config["EXTERNAL_SESSION_EXPIRE_MIN_DAYS"],
        _setting(batch_size, "EXPIRE_BATCH_SIZE"),
        _setting(sleep_ms, "EXPIRE_BATCH_SLEEP_MS"),
    )


@click.command("list-login-tokens")
@click.argument("user_id")
@click.option("--ungrouped", is_flag=True, help="One line per token instead of one per login.")
@with_appcontext
def list_login_tokens(user_id, ungrouped):
    """Print the logins of USER_ID, most recent first."""
    service = current_app.extensions["login_tokens"]
    rows = service.get_by_user(user_id, grouped=not ungrouped)
    schema = login_token_out_schema if ungrouped else login_group_out_schema
    for item in schema.dump(rows):
        click.echo(current_app.json.dumps(item))


def register_commands(app):
    app.cli.add_command(expire_login_tokens)
    app.cli.add_command(expire_external_sessions)
    app.cli.add_command(list_login_tokens)
