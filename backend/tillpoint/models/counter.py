from sqlalchemy import Column, Integer, String

from tillpoint.db.base import Base


class Counter(Base):
    """Named monotonically increasing sequence. Backs invoice numbering."""
    __tablename__ = "counters"

    name = Column(String(64), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
