"""In-memory LoginTokenStore for tests and local use."""

from __future__ import annotations

from collections.abc import MutableMapping

from models.login_token import LoginToken
from services.token_store import LoginTokenStore

_COLUMNS = tuple(column.name for column in LoginToken.__table__.columns)


class InMemoryLoginTokenStore(LoginTokenStore):
    """Keeps column values per row id and hands out fresh LoginToken objects.

    Callers never share an instance with the store, so a returned row cannot
    be mutated behind the store's back.
    """

    def __init__(self) -> None:
        self._rows: MutableMapping[str, dict] = {}

    @staticmethod
    def _build(values: dict) -> LoginToken:
        return LoginToken(**values)

    def _select(self, predicate) -> list[LoginToken]:
        return [self._build(values) for values in self._rows.values() if predicate(values)]

    def find_by_series(self, series):
        return self._select(lambda values: values["series"] == series)

    def find_by_user(self, user_id):
        rows = self._select(lambda values: values["user_id"] == user_id)
        return sorted(rows, key=lambda row: row.last_login, reverse=True)

    def group_by_user(self, user_id):
        groups: dict[tuple, dict] = {}
        for row in self.find_by_user(user_id):
            key = (row.series, row.browser, row.platform, row.expires)
            # find_by_user is newest first, so the first row seen carries the max
            groups.setdefault(key, {
                "last_login": row.last_login,
                "series": row.series,
                "browser": row.browser,
                "platform": row.platform,
                "expires": row.expires,
            })
        return list(groups.values())

    def insert(self, row):
        self._rows[row.id] = {name: getattr(row, name, None) for name in _COLUMNS}
        return row

    def delete_by_id(self, token_id):
        self._rows.pop(token_id, None)

    def _delete(self, predicate) -> int:
        doomed = [row_id for row_id, values in self._rows.items() if predicate(values)]
        for row_id in doomed:
            del self._rows[row_id]
        return len(doomed)

    def delete_by_series_except(self, series, keep_id=None):
        return self._delete(
            lambda values: values["series"] == series and values["id"] != keep_id
        )

    def delete_by_user(self, user_id):
        return self._delete(lambda values: values["user_id"] == user_id)

    def delete_where_last_login_before(self, cutoff, limit=None):
        eligible = sorted(
            (values for values in self._rows.values() if values["last_login"] < cutoff),
            key=lambda values: values["last_login"],
        )
        if limit:
            eligible = eligible[:limit]
        for values in eligible:
            del self._rows[values["id"]]
        return len(eligible)
