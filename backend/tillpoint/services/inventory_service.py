"""Product catalogue and stock. Used by product routes and sale_service."""
import logging
from decimal import Decimal
from urllib.parse import quote

from sqlalchemy.orm import Session

from tillpoint.core.config import settings
from tillpoint.core.exceptions import ConflictError, InvalidRequestError, NotFoundError
from tillpoint.models.enums import StockStatus
from tillpoint.models.product import Product
from tillpoint.schemas.product import ProductCreate, ProductUpdate
from tillpoint.services.concurrency import run_in_transaction

logger = logging.getLogger(__name__)


def stock_status(stock: int) -> str:
    """0 -> Out of Stock, below the fixed threshold -> Low Stock, else In Stock."""
    if stock <= 0:
        return StockStatus.OUT_OF_STOCK.value
    if stock < settings.LOW_STOCK_THRESHOLD:
        return StockStatus.LOW_STOCK.value
    return StockStatus.IN_STOCK.value


def placeholder_image(name: str) -> str:
    first_word = name.split(" ")[0] if name else ""
    return f"/placeholder.svg?height=40&width=40&text={quote(first_word)}"


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError("Product", product_id)
    return product


def list_products(db: Session, search: str | None = None, category: str | None = None) -> list[Product]:
    q = db.query(Product)
    if search:
        q = q.filter(Product.name.ilike(f"%{search}%"))
    if category:
        q = q.filter(Product.category == category)
    return q.order_by(Product.name, Product.id).all()


def low_stock_products(db: Session) -> list[Product]:
    """Dashboard alert list: stock at or below the product's own min_stock."""
    return (
        db.query(Product)
        .filter(Product.stock <= Product.min_stock)
        .order_by(Product.stock.asc(), Product.id)
        .all()
    )


def _validate(name: str | None, price: Decimal | None, stock: int | None, min_stock: int | None):
    if name is not None and not name.strip():
        raise InvalidRequestError("Product name cannot be empty")
    if price is not None and price < 0:
        raise InvalidRequestError("Price cannot be negative")
    if stock is not None and stock < 0:
        raise InvalidRequestError("Stock cannot be negative")
    if min_stock is not None and min_stock < 0:
        raise InvalidRequestError("Minimum stock cannot be negative")


def create_product(db: Session, data: ProductCreate) -> Product:
    _validate(data.name, data.price, data.stock, data.min_stock)

    def _create() -> Product:
        product = Product(
            name=data.name.strip(),
            category=data.category.value,
            price=data.price,
            stock=data.stock,
            min_stock=data.min_stock,
            status=stock_status(data.stock),
            supplier=data.supplier,
            image=data.image or placeholder_image(data.name.strip()),
        )
        db.add(product)
        db.flush()
        return product

    product = run_in_transaction(db, _create)
    logger.info(f"Created product {product.id} ({product.name}), stock={product.stock}")
    return product


def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product:
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    _validate(updates.get("name"), updates.get("price"), updates.get("stock"), updates.get("min_stock"))

    def _update() -> Product:
        product = get_product(db, product_id)
        for field, value in updates.items():
            if field == "category":
                value = value.value
            elif field == "name":
                value = value.strip()
            setattr(product, field, value)
        if "stock" in updates:
            product.status = stock_status(product.stock)
        db.flush()
        return product

    product = run_in_transaction(db, _update)
    logger.info(f"Updated product {product_id}: {sorted(updates)}")
    return product


def delete_product(db: Session, product_id: int) -> str:
    """Hard delete. Past sales keep their own name/price snapshot."""
    def _delete() -> str:
        product = get_product(db, product_id)
        name = product.name
        db.delete(product)
        db.flush()
        return name

    name = run_in_transaction(db, _delete)
    logger.info(f"Deleted product {product_id} ({name})")
    return name


def decrement_stock(db: Session, product: Product, quantity: int) -> Product:
    """Take quantity units out of stock inside the caller's transaction.

    Refuses to go below zero unless ALLOW_NEGATIVE_STOCK is set. The
    product's version column turns a concurrent decrement into a
    StaleDataError at flush instead of a lost update.
    """
    new_stock = product.stock - quantity
    if new_stock < 0 and not settings.ALLOW_NEGATIVE_STOCK:
        raise ConflictError(
            f"Insufficient stock for {product.name}: {product.stock} available, {quantity} requested"
        )
    logger.debug(f"Stock for {product.name}: {product.stock} -> {new_stock}")
    product.stock = new_stock
    product.status = stock_status(new_stock)
    return product
