"""Storage port for login token rows."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from models.login_token import LoginToken


@runtime_checkable
class LoginTokenStore(Protocol):
    """Contract the login token service needs from its storage."""

    def find_by_series(self, series: str) -> list[LoginToken]: ...

    def find_by_user(self, user_id: str) -> list[LoginToken]:
        """Rows of one user, most recent last_login first."""
        ...

    def group_by_user(self, user_id: str) -> list[dict]:
        """One dict per (series, browser, platform, expires) with the latest last_login.

        Keys: last_login, series, browser, platform, expires. Most recent first.
        """
        ...

    def insert(self, row: LoginToken) -> LoginToken: ...

    def delete_by_id(self, token_id: str) -> None: ...

    def delete_by_series_except(self, series: str, keep_id: str | None = None) -> int: ...

    def delete_by_user(self, user_id: str) -> int: ...

    def delete_where_last_login_before(self, cutoff: datetime, limit: int | None = None) -> int: ...
