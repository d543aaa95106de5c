from sqlalchemy import Column, Integer, String, DateTime

from tillpoint.core.time_utils import utcnow
from tillpoint.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default="user")  # admin | user
    created_at = Column(DateTime, default=utcnow)
