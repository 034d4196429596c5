from sqlalchemy import Column, String, DateTime
from models.base_model import BaseModel, Base


class ExternalSession(BaseModel, Base):
    """Maps a local session id to the session id of an external login provider."""
    __tablename__ = "external_sessions"

    session_id = Column(String(128), nullable=False, unique=True, index=True)
    external_session_id = Column(String(255), nullable=False, index=True)
    created = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<ExternalSession session={self.session_id} external={self.external_session_id}>"
