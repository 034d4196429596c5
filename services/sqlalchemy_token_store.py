"""LoginTokenStore backed by the shared DBStorage (SQLAlchemy)."""

from __future__ import annotations

from sqlalchemy import desc, func

from models.login_token import LoginToken
from services.token_store import LoginTokenStore


class SQLAlchemyLoginTokenStore(LoginTokenStore):
    """Every mutating call commits through DBStorage.save(), which rolls back on failure."""

    def __init__(self, storage) -> None:
        self._storage = storage

    def _query(self):
        return self._storage.get_session().query(LoginToken)

    def find_by_series(self, series):
        return self._query().filter(LoginToken.series == series).all()

    def find_by_user(self, user_id):
        return (
            self._query()
            .filter(LoginToken.user_id == user_id)
            .order_by(LoginToken.last_login.desc())
            .all()
        )

    def group_by_user(self, user_id):
        session = self._storage.get_session()
        rows = (
            session.query(
                func.max(LoginToken.last_login).label("last_login"),
                LoginToken.series,
                LoginToken.browser,
                LoginToken.platform,
                LoginToken.expires,
            )
            .filter(LoginToken.user_id == user_id)
            .group_by(
                LoginToken.series,
                LoginToken.browser,
                LoginToken.platform,
                LoginToken.expires,
            )
            .order_by(desc("last_login"))
            .all()
        )
        return [row._asdict() for row in rows]

    def insert(self, row):
        self._storage.new(row)
        self._storage.save()
        return row

    def delete_by_id(self, token_id):
        self._query().filter(LoginToken.id == token_id).delete()
        self._storage.save()

    def delete_by_series_except(self, series, keep_id=None):
        query = self._query().filter(LoginToken.series == series)
        if keep_id is not None:
            query = query.filter(LoginToken.id != keep_id)
        count = query.delete()
        self._storage.save()
        return count

    def delete_by_user(self, user_id):
        count = self._query().filter(LoginToken.user_id == user_id).delete()
        self._storage.save()
        return count

    def delete_where_last_login_before(self, cutoff, limit=None):
        return self._storage.delete_older_than(LoginToken, "last_login", cutoff, limit)
