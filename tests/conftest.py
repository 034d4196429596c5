"""
Shared pytest fixtures:
- an in-memory SQLite DBStorage per test
- both LoginTokenStore implementations (parametrized)
- a settable clock for expiry checks
- the Flask console app and its CLI runner
"""
import os
from datetime import datetime

import pytest

# Configure test environment before the models package builds its storage
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from models import storage as app_storage  # noqa: E402
from models.db_storage import DBStorage  # noqa: E402
from models.user import User  # noqa: E402
from services.in_memory_token_store import InMemoryLoginTokenStore  # noqa: E402
from services.login_token_service import LoginTokenService  # noqa: E402
from services.sqlalchemy_token_store import SQLAlchemyLoginTokenStore  # noqa: E402

ALICE = "11111111-1111-1111-1111-111111111111"
BOB = "22222222-2222-2222-2222-222222222222"

# 2026-01-01T00:00:00Z
START = 1767225600.0


class FakeClock:
    """Callable returning epoch seconds; tests move it with advance()."""

    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def add_users(target):
    for user_id, name in ((ALICE, "alice"), (BOB, "bob")):
        target.new(User(id=user_id, username=name, email=f"{name}@example.org"))
    target.save()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_storage():
    """Fresh in-memory database with the two test users."""
    db = DBStorage("sqlite://")
    db.reload()
    add_users(db)
    yield db
    db.close()


@pytest.fixture(params=["memory", "sqlalchemy"])
def token_store(request):
    if request.param == "memory":
        return InMemoryLoginTokenStore()
    return SQLAlchemyLoginTokenStore(request.getfixturevalue("db_storage"))


@pytest.fixture
def service(token_store, clock):
    return LoginTokenService(token_store, clock=clock)


@pytest.fixture
def app():
    from console import create_app

    app = create_app("testing")
    add_users(app_storage)
    yield app
    app_storage.drop_all()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def at(*args):
    """Shorthand for a naive UTC datetime."""
    return datetime(*args)
