from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text

from tillpoint.core.time_utils import utcnow
from tillpoint.db.base import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(String(512), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String(64), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
