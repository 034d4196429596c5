"""
Login token service: persistent "remember me" tokens.

- issue_token, create_and_persist_token and rotate_token issue tokens; only
  digests are stored
- match_token verifies a presented (series, token) pair, purges an expired
  match and reports a known series with a wrong token as LoginTokenMismatch
- get_by_series / get_by_user list rows, delete_by_series / delete_by_user
  revoke them, delete_expired sweeps stale rows in batches
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from models.login_token import LoginToken
from models.schemas.login_token import TokenCredentialSchema
from services.exceptions import LoginTokenMismatch
from services.token_store import LoginTokenStore
from utils.security import generate_series, generate_token, hash_token, token_matches, utc_datetime

logger = logging.getLogger(__name__)

credential_schema = TokenCredentialSchema()


def _user_id(user_or_id) -> str:
    return user_or_id if isinstance(user_or_id, str) else user_or_id.id


class LoginTokenService:
    """Stateless between calls; all state lives in the store."""

    def __init__(self, store: LoginTokenStore, clock: Callable[[], float] = time.time) -> None:
        self._store = store
        self._clock = clock

    def create_and_persist_token(
        self,
        user,
        token: str,
        series: str,
        browser: str = "",
        platform: str = "",
        expires: int = 0,
        session_id: str = "",
    ) -> LoginToken:
        """Hash `token` and insert a new row for `user` (a User or a user id).

        Prior rows of the series are left alone; see rotate_token().
        """
        row = LoginToken(
            token=hash_token(token),
            series=series,
            user_id=_user_id(user),
            last_login=utc_datetime(self._clock()),
            browser=browser,
            platform=platform,
            expires=expires,
            last_session_id=session_id,
        )
        return self._store.insert(row)

    def issue_token(
        self,
        user,
        expires: int,
        browser: str = "",
        platform: str = "",
        session_id: str = "",
    ) -> tuple[LoginToken, str]:
        """Start a new series for `user` with a random secret.

        Returns the stored row and the raw secret; the secret is not kept
        anywhere else, so the caller must hand it to the client now.
        """
        token = generate_token()
        row = self.create_and_persist_token(
            user, token, generate_series(), browser, platform, expires, session_id
        )
        return row, token

    def rotate_token(self, current: LoginToken, token: str, expires: int, session_id: str = "") -> LoginToken:
        """Replace `current` with a new token in the same series and drop the rest of the series."""
        row = self.create_and_persist_token(
            current.user_id,
            token,
            current.series,
            browser=current.browser,
            platform=current.platform,
            expires=expires,
            session_id=session_id,
        )
        self.delete_by_series(current.series, keep_id=row.id)
        return row

    def match_token(self, series: str, token: str) -> Optional[LoginToken]:
        """
        Check a presented token against the rows of its series.

        Returns the matching row, or None when the series is unknown or the
        matching row has expired (that row is deleted). Raises
        LoginTokenMismatch when the series has rows but none matches.
        """
        user_id = None
        for row in self._store.find_by_series(series):
            user_id = row.user_id
            if token_matches(row.token, token):
                if self._clock() > row.expires:
                    self._store.delete_by_id(row.id)
                    logger.info("Deleted expired login token %s of user %s", row.id, row.user_id)
                    return None
                return row
        if user_id:
            logger.warning("Login token mismatch for user %s", user_id)
            raise LoginTokenMismatch(user_id)
        return None

    def match_credentials(self, data: dict) -> Optional[LoginToken]:
        """Validate a {"series", "token"} mapping (e.g. a parsed cookie) and match it.

        Raises marshmallow.ValidationError on malformed input.
        """
        credentials = credential_schema.load(data)
        return self.match_token(credentials["series"], credentials["token"])

    def get_by_series(self, series: str) -> list[LoginToken]:
        return self._store.find_by_series(series)

    def get_by_user(self, user_or_id, grouped: bool = True) -> list:
        """Logins of a user, most recent first; grouped returns one dict per series/browser/platform/expires."""
        user_id = _user_id(user_or_id)
        if grouped:
            return self._store.group_by_user(user_id)
        return self._store.find_by_user(user_id)

    def delete_by_series(self, series: str, keep_id: Optional[str] = None) -> int:
        return self._store.delete_by_series_except(series, keep_id)

    def delete_by_user(self, user_or_id) -> int:
        user_id = _user_id(user_or_id)
        count = self._store.delete_by_user(user_id)
        logger.info("Deleted %d login tokens of user %s", count, user_id)
        return count

    def delete_expired(self, date_limit: datetime, limit: Optional[int] = None) -> int:
        """Delete rows last used before date_limit; a positive limit caps one batch."""
        if limit is not None and limit <= 0:
            limit = None
        return self._store.delete_where_last_login_before(date_limit, limit)
