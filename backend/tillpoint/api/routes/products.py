"""Product catalogue. Any till user can read; only admins write."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tillpoint.api.deps import get_db, get_current_user, require_admin
from tillpoint.core.audit import AuditLog
from tillpoint.core.exceptions import BusinessError, DomainError
from tillpoint.models.enums import ProductCategory
from tillpoint.models.user import User
from tillpoint.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from tillpoint.services import inventory_service

router = APIRouter()


@router.get("", response_model=list[ProductResponse])
def list_products(
    search: str | None = Query(None),
    category: ProductCategory | None = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return inventory_service.list_products(db, search=search, category=category.value if category else None)


@router.get("/low-stock", response_model=list[ProductResponse])
def list_low_stock(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Products at or below their own minimum stock, emptiest first."""
    return inventory_service.low_stock_products(db)


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(
    data: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        product = inventory_service.create_product(db, data)
    except DomainError as e:
        raise BusinessError.from_domain(e)
    AuditLog.log_action("create", "product", product.id, current_user, changes={"name": product.name})
    return product


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    data: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        product = inventory_service.update_product(db, product_id, data)
    except DomainError as e:
        raise BusinessError.from_domain(e)
    AuditLog.log_action(
        "update", "product", product_id, current_user,
        changes=data.model_dump(exclude_unset=True, exclude_none=True, mode="json"),
    )
    return product


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        name = inventory_service.delete_product(db, product_id)
    except DomainError as e:
        raise BusinessError.from_domain(e)
    AuditLog.log_action("delete", "product", product_id, current_user, changes={"name": name})
    return {"message": "Product deleted successfully", "id": product_id}
