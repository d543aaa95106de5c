from sqlalchemy import Column, Integer, String, Numeric, DateTime

from tillpoint.core.time_utils import utcnow
from tillpoint.db.base import Base


class Product(Base):
    """
    Catalogue item sold at the till.

    status is derived from stock (see inventory_service.stock_status) and
    rewritten whenever stock changes. min_stock is only the dashboard alert
    threshold and does not affect status.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(64), nullable=False)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=0)
    status = Column(String(32), nullable=False, default="Out of Stock")
    supplier = Column(String(255), nullable=True)
    image = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    # Optimistic concurrency token: a stale write raises StaleDataError
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
