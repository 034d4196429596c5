import logging

from flask import Flask

from .config import get_config
from .commands import register_commands
from models import storage  # DBStorage singleton (scoped_session)
from services.external_session_service import ExternalSessionService
from services.login_token_service import LoginTokenService
from services.sqlalchemy_token_store import SQLAlchemyLoginTokenStore


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app that hosts the
    maintenance commands.
      - Environment-based configuration (get_config)
      - Services wired to the shared DBStorage and exposed on app.extensions
      - CLI commands registered on app.cli
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))

    logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO)

    # Create tables if needed and open the scoped session
    storage.reload()

    app.extensions["login_tokens"] = LoginTokenService(SQLAlchemyLoginTokenStore(storage))
    app.extensions["external_sessions"] = ExternalSessionService(storage)

    register_commands(app)

    # Ensure the DB session is removed at the end of each app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    return app
