import json
import logging
from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import ALICE, BOB
from models import storage
from models.external_session import ExternalSession
from models.login_token import LoginToken
from utils.security import utcnow, hash_token


def add_token(series, user_id=ALICE, days_ago=0.0, browser="Firefox", platform="Linux", expires=2000000000):
    storage.new(LoginToken(
        user_id=user_id,
        token=hash_token(series),
        series=series,
        last_login=utcnow() - timedelta(days=days_ago),
        browser=browser,
        platform=platform,
        expires=expires,
    ))
    storage.save()


def add_session(session_id, days_ago=0.0):
    storage.new(ExternalSession(
        session_id=session_id,
        external_session_id=f"ext-{session_id}",
        created=utcnow() - timedelta(days=days_ago),
    ))
    storage.save()


def test_create_app_wires_services(app):
    assert app.config["TESTING"] is True
    assert set(app.extensions) >= {"login_tokens", "external_sessions"}
    assert {"expire-login-tokens", "expire-external-sessions", "list-login-tokens"} <= set(app.cli.commands)


def test_expire_login_tokens_in_batches(runner):
    for n in range(5):
        add_token(f"old-{n}", days_ago=40 + n)
    add_token("fresh", days_ago=1)

    result = runner.invoke(args=["expire-login-tokens", "30", "--batch-size", "2", "--sleep", "0"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines == [
        "2 expired login tokens deleted.",
        "2 expired login tokens deleted.",
        "1 expired login tokens deleted.",
        "5 expired login tokens deleted in total.",
    ]
    assert [row.series for row in storage.all(LoginToken).values()] == ["fresh"]


def test_expire_login_tokens_uses_configured_age(app, runner):
    app.config["LOGIN_TOKEN_EXPIRE_DAYS"] = 10
    add_token("old", days_ago=11)
    add_token("recent", days_ago=9)

    result = runner.invoke(args=["expire-login-tokens"])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[-1] == "1 expired login tokens deleted in total."
    assert [row.series for row in storage.all(LoginToken).values()] == ["recent"]


def test_expire_login_tokens_nothing_to_do(runner):
    result = runner.invoke(args=["expire-login-tokens", "30"])
    assert result.exit_code == 0
    assert result.output == "0 expired login tokens deleted in total.\n"


def test_expire_external_sessions(runner):
    add_session("old", days_ago=3)
    add_session("new", days_ago=0.5)

    result = runner.invoke(args=["expire-external-sessions", "2", "--batch-size", "0"])

    assert result.exit_code == 0, result.output
    assert "1 expired external sessions deleted in total." in result.output
    assert [row.session_id for row in storage.all(ExternalSession).values()] == ["new"]


def test_expire_external_sessions_rejects_age_below_minimum(runner):
    add_session("new", days_ago=0.1)

    result = runner.invoke(args=["expire-external-sessions", "0.5"])

    assert result.exit_code == 2
    assert "at least 1 days" in result.output
    assert storage.count(ExternalSession) == 1


@pytest.mark.parametrize("args", [["--batch-size", "-1"], ["--sleep", "-5"], ["abc"]])
def test_expire_rejects_bad_options(runner, args):
    result = runner.invoke(args=["expire-login-tokens", *args])
    assert result.exit_code == 2


def test_list_login_tokens_grouped(runner):
    add_token("laptop", days_ago=2)
    add_token("phone", days_ago=1, browser="Safari", platform="iOS")
    add_token("desk", user_id=BOB)

    result = runner.invoke(args=["list-login-tokens", ALICE])

    assert result.exit_code == 0, result.output
    items = [json.loads(line) for line in result.output.splitlines()]
    assert [item["series"] for item in items] == ["phone", "laptop"]
    assert set(items[0]) == {"series", "browser", "platform", "expires", "last_login"}
    assert items[0]["browser"] == "Safari"


def test_list_login_tokens_ungrouped_hides_digest(runner):
    add_token("laptop")

    result = runner.invoke(args=["list-login-tokens", ALICE, "--ungrouped"])

    assert result.exit_code == 0, result.output
    (item,) = [json.loads(line) for line in result.output.splitlines()]
    assert item["series"] == "laptop"
    assert item["user_id"] == ALICE
    assert "token" not in item
    assert hash_token("laptop") not in result.output


def test_list_login_tokens_unknown_user(runner):
    result = runner.invoke(args=["list-login-tokens", "nobody"])
    assert result.exit_code == 0
    assert result.output == ""


@pytest.mark.parametrize(
    "days_old, message",
    [("1000000", "out of range"), ("nan", "finite"), ("inf", "finite")],
)
def test_expire_rejects_unusable_age(runner, days_old, message):
    add_token("old", days_ago=40)

    result = runner.invoke(args=["expire-login-tokens", days_old])

    assert result.exit_code == 2
    assert message in result.output
    assert storage.count(LoginToken) == 1


class FailingService:
    def delete_expired(self, date_limit, limit=None):
        raise SQLAlchemyError("database is locked")


def test_expire_reports_database_error(app, runner, monkeypatch, caplog):
    monkeypatch.setitem(app.extensions, "login_tokens", FailingService())

    with caplog.at_level(logging.ERROR, logger="console.commands"):
        result = runner.invoke(args=["expire-login-tokens", "30"])

    assert result.exit_code == 1
    assert "Database error while expiring login tokens: database is locked" in result.output
    records = [r for r in caplog.records if r.name == "console.commands"]
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].exc_info is not None
