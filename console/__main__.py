"""
Entrypoint for the maintenance CLI:
    python -m console expire-login-tokens 30
    login-tokens list-login-tokens <user_id>
"""
from flask.cli import FlaskGroup

from . import create_app

# Respect APP_ENV for configuration selection (handled in get_config())
cli = FlaskGroup(create_app=create_app, help="Login token maintenance commands.")

if __name__ == "__main__":
    cli()
