"""Invoice numbering and customer-name handling. Used by sale_service."""
import logging

from sqlalchemy.orm import Session

from tillpoint.core.config import settings
from tillpoint.models.counter import Counter
from tillpoint.models.sale import Sale

logger = logging.getLogger(__name__)

INVOICE_COUNTER = "invoice"


def normalize_customer_name(name: str | None) -> str:
    """Trim surrounding whitespace; blank names become the walk-in customer.

    Matching on the result stays exact and case-sensitive: "Ali" and "ali"
    are two different tabs.
    """
    if name is None:
        return settings.DEFAULT_CUSTOMER_NAME
    name = name.strip()[:255]
    return name or settings.DEFAULT_CUSTOMER_NAME


def format_invoice_id(number: int) -> str:
    """7 -> INV-0007. Numbers past 9999 simply grow wider."""
    return f"{settings.INVOICE_PREFIX}{number:04d}"


def next_invoice_id(db: Session) -> str:
    """Reserve the next invoice number inside the caller's transaction.

    The counter row is locked where the backend supports it and versioned
    everywhere, so two concurrent checkouts can never both get the same
    number: the loser fails at flush with StaleDataError and is retried by
    the caller. A missing counter is seeded from the current sale count.
    """
    counter = (
        db.query(Counter)
        .filter(Counter.name == INVOICE_COUNTER)
        .with_for_update()
        .first()
    )
    if counter is None:
        existing = db.query(Sale).count()
        counter = Counter(name=INVOICE_COUNTER, value=existing)
        db.add(counter)
        logger.info(f"Seeded invoice counter at {existing}")

    counter.value += 1
    db.flush()
    return format_invoice_id(counter.value)
