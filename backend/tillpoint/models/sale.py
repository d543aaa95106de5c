"""
Sale: one customer invoice. Line items are embedded as a JSON list, so a
sale is read and written as a single record, items included.

Status flow: created Completed (terminal) or created Partial Payment ->
(consolidate / payment / debt) -> Partial Payment | Completed.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.types import JSON

from tillpoint.core.time_utils import utcnow
from tillpoint.db.base import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(String(32), unique=True, nullable=False, index=True)
    # No customer table: the free-text name is the customer's identity
    customer_name = Column(String(255), nullable=False, index=True)
    customer_phone = Column(String(64), nullable=True)
    # [{"product_id", "name", "quantity", "price", "total"}], money as strings
    items = Column(JSON, nullable=False, default=list)
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    payment_method = Column(String(32), nullable=False)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    remaining_balance = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(32), nullable=False, index=True)
    idempotency_key = Column(String(128), unique=True, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Sale {self.invoice_id} {self.customer_name!r} status={self.status}>"
