from models.base_model import Base, BaseModel
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship


class User(BaseModel, Base):
    __tablename__ = "users"
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)

    # Tokens go with the user; the database cascade does the deleting
    login_tokens = relationship(
        "LoginToken",
        back_populates="user",
        passive_deletes=True
    )
