"""Session gate: shop staff accounts"""

from sqlalchemy import Column, String, Boolean, Integer

from spraydesk.models.base import BaseModel


class User(BaseModel):
    """
    Staff login. ``session_version`` is stamped into every issued token;
    signing out bumps it, which invalidates all outstanding tokens.
    """
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    session_version = Column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.email}>"
