"""
External session service: maps local session ids to the session ids handed
out by an external login provider, so a provider-side logout can find and
end the matching local session.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from models.external_session import ExternalSession
from utils.security import utc_datetime

logger = logging.getLogger(__name__)


class ExternalSessionService:

    def __init__(self, storage, clock: Callable[[], float] = time.time) -> None:
        self._storage = storage
        self._clock = clock

    def _query(self):
        return self._storage.get_session().query(ExternalSession)

    def add_session_mapping(self, local_session_id: str, external_session_id: str) -> ExternalSession:
        """Map a local session to an external one, replacing any earlier mapping of the local session."""
        self.destroy_session(local_session_id)
        row = ExternalSession(
            session_id=local_session_id,
            external_session_id=external_session_id,
            created=utc_datetime(self._clock()),
        )
        self._storage.new(row)
        self._storage.save()
        return row

    def get_all_by_external_session_id(self, sid: str) -> list[ExternalSession]:
        return self._query().filter(ExternalSession.external_session_id == sid).all()

    def destroy_session(self, sid: str) -> int:
        """Delete the mapping of local session `sid`."""
        count = self._query().filter(ExternalSession.session_id == sid).delete()
        self._storage.save()
        return count

    def delete_expired(self, date_limit: datetime, limit: Optional[int] = None) -> int:
        """Delete mappings created before date_limit; a positive limit caps one batch."""
        if limit is not None and limit <= 0:
            limit = None
        count = self._storage.delete_older_than(ExternalSession, "created", date_limit, limit)
        if count:
            logger.info("Deleted %d expired external sessions", count)
        return count
