from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from tillpoint.core.time_utils import utcnow
from tillpoint.db.base import Base


class AppliedKey(Base):
    """
    Idempotency key already spent on a sale write.

    Keys that created a sale live on Sale.idempotency_key; keys that were
    folded into an existing tab are recorded here, so a replayed request
    of either kind finds the sale it produced.
    """
    __tablename__ = "applied_keys"

    key = Column(String(128), primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
