"""
Sales: checkout, open-tab consolidation, payments and debt.

Every write runs through run_in_transaction, so the sale row, the invoice
counter and all stock decrements commit together or not at all.

Money rules shared by every path:
- line total = stored product price x quantity (client figures are ignored)
- remaining_balance = max(0, total - amount_paid)
- status = Completed when total - amount_paid <= 0, else Partial Payment
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from sqlalchemy import or_
from sqlalchemy.orm import Session

from tillpoint.core.exceptions import ConflictError, InvalidRequestError, NotFoundError
from tillpoint.core.time_utils import utcnow
from tillpoint.models.enums import PaymentMethod, SaleStatus
from tillpoint.models.idempotency import AppliedKey
from tillpoint.models.product import Product
from tillpoint.models.sale import Sale
from tillpoint.schemas.sale import CartLine, SaleCreate
from tillpoint.services.concurrency import run_in_transaction
from tillpoint.services.inventory_service import decrement_stock, get_product
from tillpoint.services.invoice_service import next_invoice_id, normalize_customer_name

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def classify_balance(total, amount_paid) -> tuple[Decimal, str]:
    """Return (remaining_balance, status) for a sale's running totals."""
    outstanding = to_money(total) - to_money(amount_paid)
    if outstanding <= 0:
        return ZERO, SaleStatus.COMPLETED.value
    return outstanding, SaleStatus.PARTIAL_PAYMENT.value


def merge_items(existing: Iterable[dict], new_items: Iterable[dict]) -> list[dict]:
    """Fold new lines into existing ones by product_id.

    A product already on the invoice keeps its position and accumulates
    quantity and total; unseen products are appended in arrival order.
    Returns new dicts, the inputs are left untouched.
    """
    merged = [dict(item) for item in existing]
    for new in new_items:
        match = next((item for item in merged if item["product_id"] == new["product_id"]), None)
        if match is None:
            merged.append(dict(new))
            continue
        match["quantity"] = int(match["quantity"]) + int(new["quantity"])
        match["total"] = str(to_money(match["total"]) + to_money(new["total"]))
    return merged


def items_total(items: Iterable[dict]) -> Decimal:
    return sum((to_money(item["total"]) for item in items), ZERO)


def price_lines(db: Session, lines: list[CartLine]) -> tuple[list[dict], dict[int, Product]]:
    """Price cart lines from the stored catalogue.

    Returns the priced lines (storage format) and the products they touch,
    keyed by id, for the stock step.
    """
    priced = []
    products: dict[int, Product] = {}
    for line in lines:
        if line.quantity is None or line.quantity <= 0:
            raise InvalidRequestError("Item quantity must be a positive whole number")
        product = products.get(line.product_id) or get_product(db, line.product_id)
        products[product.id] = product

        price = to_money(product.price)
        total = price * line.quantity
        if line.total is not None and to_money(line.total) != total:
            logger.info(
                f"Ignoring client total {line.total} for product {product.id}; server total is {total}"
            )
        priced.append({
            "product_id": product.id,
            "name": product.name,
            "quantity": int(line.quantity),
            "price": str(price),
            "total": str(total),
        })
    return priced, products


def _take_stock(db: Session, priced: list[dict], products: dict[int, Product]):
    for item in priced:
        decrement_stock(db, products[item["product_id"]], item["quantity"])


def _ensure_open(sale: Sale):
    if sale.status != SaleStatus.PARTIAL_PAYMENT.value:
        raise ConflictError(f"Sale {sale.invoice_id} is {sale.status} and cannot be changed")


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = db.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        raise NotFoundError("Sale", sale_id)
    return sale


def list_sales(db: Session, search: str | None = None) -> list[Sale]:
    """Full history, newest first. No pagination."""
    q = db.query(Sale)
    if search:
        q = q.filter(Sale.customer_name.ilike(f"%{search}%"))
    return q.order_by(Sale.created_at.desc(), Sale.id.desc()).all()


def list_open_sales(db: Session, search: str | None = None) -> list[Sale]:
    """Open tabs: Partial Payment with something still owed, newest first."""
    q = db.query(Sale).filter(
        Sale.status == SaleStatus.PARTIAL_PAYMENT.value,
        Sale.remaining_balance > 0,
    )
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(
            Sale.customer_name.ilike(pattern),
            Sale.invoice_id.ilike(pattern),
            Sale.customer_phone.ilike(pattern),
        ))
    return q.order_by(Sale.created_at.desc(), Sale.id.desc()).all()


def find_open_sale_for_customer(db: Session, customer_name: str) -> Sale | None:
    """Most recent Partial Payment sale whose name matches exactly (case-sensitive)."""
    return (
        db.query(Sale)
        .filter(
            Sale.customer_name == customer_name,
            Sale.status == SaleStatus.PARTIAL_PAYMENT.value,
        )
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .first()
    )


def find_replay(db: Session, idempotency_key: str | None) -> tuple[Sale, bool] | None:
    """Sale already written under idempotency_key, and whether that write was a consolidation."""
    if not idempotency_key:
        return None
    created = db.query(Sale).filter(Sale.idempotency_key == idempotency_key).first()
    if created is not None:
        logger.info(f"Idempotent replay of {created.invoice_id} (key {idempotency_key})")
        return created, False
    applied = db.query(AppliedKey).filter(AppliedKey.key == idempotency_key).first()
    if applied is not None:
        sale = get_sale(db, applied.sale_id)
        logger.info(f"Idempotent replay of consolidation into {sale.invoice_id} (key {idempotency_key})")
        return sale, True
    return None


def create_sale(db: Session, data: SaleCreate, created_by: int | None = None) -> Sale:
    """Record a new sale and take its items out of stock.

    A repeated idempotency_key returns the sale already recorded under it
    without touching stock again.
    """
    if not data.items:
        raise InvalidRequestError("No items provided")
    half_payment = data.payment_method == PaymentMethod.HALF_PAYMENT
    if half_payment and (data.amount_paid is None or data.amount_paid < 0):
        raise InvalidRequestError("Invalid payment amount")

    customer_name = normalize_customer_name(data.customer_name)

    def _create() -> Sale:
        replay = find_replay(db, data.idempotency_key)
        if replay is not None:
            return replay[0]

        priced, products = price_lines(db, data.items)
        items = merge_items([], priced)
        total = items_total(items)

        if half_payment:
            amount_paid = to_money(data.amount_paid)
            remaining, status = classify_balance(total, amount_paid)
            if status == SaleStatus.COMPLETED.value:
                amount_paid = total
        else:
            amount_paid, remaining, status = total, ZERO, SaleStatus.COMPLETED.value

        sale = Sale(
            invoice_id=next_invoice_id(db),
            customer_name=customer_name,
            customer_phone=data.customer_phone,
            items=items,
            subtotal=total,
            tax=ZERO,
            total=total,
            payment_method=data.payment_method.value,
            amount_paid=amount_paid,
            remaining_balance=remaining,
            status=status,
            idempotency_key=data.idempotency_key,
            created_by=created_by,
        )
        db.add(sale)
        _take_stock(db, priced, products)
        db.flush()
        logger.info(
            f"Created sale {sale.invoice_id} for {customer_name!r}: total={total} "
            f"paid={amount_paid} status={status}"
        )
        return sale

    return run_in_transaction(db, _create)


def consolidate_sale(
    db: Session,
    sale_id: int,
    additional_payment,
    new_items: list[CartLine],
    idempotency_key: str | None = None,
) -> Sale:
    """Fold a returning customer's new items and payment into their open sale.

    With an idempotency_key the merge happens at most once; a replay
    returns the sale as the first request left it.
    """
    if additional_payment is None or additional_payment < 0:
        raise InvalidRequestError("Invalid payment amount")
    if not new_items:
        raise InvalidRequestError("No items provided")
    payment = to_money(additional_payment)

    def _consolidate() -> Sale:
        replay = find_replay(db, idempotency_key)
        if replay is not None:
            return replay[0]

        sale = get_sale(db, sale_id)
        _ensure_open(sale)

        priced, products = price_lines(db, new_items)
        added = items_total(priced)
        new_total = to_money(sale.total) + added
        new_amount_paid = to_money(sale.amount_paid) + payment
        remaining, status = classify_balance(new_total, new_amount_paid)

        sale.items = merge_items(sale.items or [], priced)
        sale.subtotal = to_money(sale.subtotal) + added
        sale.total = new_total
        sale.amount_paid = new_amount_paid
        sale.remaining_balance = remaining
        sale.status = status
        sale.updated_at = utcnow()

        _take_stock(db, priced, products)
        if idempotency_key:
            db.add(AppliedKey(key=idempotency_key, sale_id=sale.id))
        db.flush()
        logger.info(
            f"Consolidated {len(priced)} item(s) into {sale.invoice_id}: +{added} total, "
            f"+{payment} paid, balance={remaining} status={status}"
        )
        return sale

    return run_in_transaction(db, _consolidate)


def apply_payment(db: Session, sale_id: int, additional_payment) -> Sale:
    """Top up what an open sale has been paid."""
    if additional_payment is None or additional_payment <= 0:
        raise InvalidRequestError("Invalid payment amount")
    payment = to_money(additional_payment)

    def _pay() -> Sale:
        sale = get_sale(db, sale_id)
        _ensure_open(sale)
        new_amount_paid = to_money(sale.amount_paid) + payment
        remaining, status = classify_balance(sale.total, new_amount_paid)
        sale.amount_paid = new_amount_paid
        sale.remaining_balance = remaining
        sale.status = status
        sale.updated_at = utcnow()
        db.flush()
        logger.info(f"Payment of {payment} on {sale.invoice_id}: balance={remaining} status={status}")
        return sale

    return run_in_transaction(db, _pay)


def add_debt(db: Session, sale_id: int, additional_debt) -> Sale:
    """Add an amount owed (no items) to an open sale's total."""
    if additional_debt is None or additional_debt <= 0:
        raise InvalidRequestError("Invalid debt amount")
    debt = to_money(additional_debt)

    def _add_debt() -> Sale:
        sale = get_sale(db, sale_id)
        _ensure_open(sale)
        new_total = to_money(sale.total) + debt
        remaining, status = classify_balance(new_total, sale.amount_paid)
        sale.total = new_total
        sale.remaining_balance = remaining
        sale.status = status
        sale.updated_at = utcnow()
        db.flush()
        logger.info(f"Debt of {debt} added to {sale.invoice_id}: balance={remaining}")
        return sale

    return run_in_transaction(db, _add_debt)


def checkout(db: Session, data: SaleCreate, created_by: int | None = None) -> tuple[Sale, bool]:
    """Till entry point. Returns (sale, consolidated).

    A Half Payment checkout for a customer who already has an open tab is
    added to that tab instead of opening a second invoice.

    A replayed idempotency_key is resolved before routing: the tab opened
    by the first attempt must not pull the retry into itself.
    """
    replay = find_replay(db, data.idempotency_key)
    if replay is not None:
        return replay

    if data.payment_method == PaymentMethod.HALF_PAYMENT:
        customer_name = normalize_customer_name(data.customer_name)
        open_sale = find_open_sale_for_customer(db, customer_name)
        if open_sale is not None:
            logger.info(f"Checkout for {customer_name!r} routed to open tab {open_sale.invoice_id}")
            sale = consolidate_sale(
                db, open_sale.id, data.amount_paid, data.items, idempotency_key=data.idempotency_key
            )
            return sale, True
    return create_sale(db, data, created_by=created_by), False
