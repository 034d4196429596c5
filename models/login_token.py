"""
LoginToken model: one row per issued "remember me" token.
Fields:
- series: groups every rotated token of one browser/device chain
- token: sha256 hex digest of the secret (the secret itself is never stored)
- user_id (String(36)) - FK to users.id
- last_login: last successful use, basis of the expiration sweep
- expires: absolute expiry, epoch seconds
- browser, platform, last_session_id: display metadata
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from models.base_model import BaseModel, Base


class LoginToken(BaseModel, Base):
    __tablename__ = "login_tokens"
    _sensitive_fields = ("token",)

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(64), nullable=False)
    series = Column(String(255), nullable=False, index=True)
    last_login = Column(DateTime, nullable=False, index=True)
    browser = Column(String(255), nullable=False, default="")
    platform = Column(String(255), nullable=False, default="")
    expires = Column(Integer, nullable=False, default=0)
    last_session_id = Column(String(128), nullable=False, default="")

    user = relationship("User", back_populates="login_tokens")

    def __repr__(self):
        return f"<LoginToken series={self.series} user={self.user_id}>"
