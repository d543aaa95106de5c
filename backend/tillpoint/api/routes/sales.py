"""
Sales: checkout, open tabs, payments, debt and consolidation.

Every write here is one transaction in sale_service. Storage failures are
rolled back there and reported as a generic 500.
"""
from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tillpoint.api.deps import get_db, get_current_user
from tillpoint.core.audit import AuditLog
from tillpoint.core.exceptions import BusinessError, DomainError
from tillpoint.models.user import User
from tillpoint.schemas.sale import (
    CheckoutResponse,
    ConsolidateRequest,
    DebtRequest,
    PaymentRequest,
    SaleCreate,
    SaleResponse,
)
from tillpoint.services import receipt_service, sale_service

router = APIRouter()


def _call(operation, *args, **kwargs):
    try:
        return operation(*args, **kwargs)
    except DomainError as e:
        raise BusinessError.from_domain(e)
    except SQLAlchemyError as e:
        raise BusinessError.server_error(e)


def _money_snapshot(sale) -> dict:
    return {
        "invoice_id": sale.invoice_id,
        "total": str(sale.total),
        "amount_paid": str(sale.amount_paid),
        "remaining_balance": str(sale.remaining_balance),
        "status": sale.status,
    }


@router.get("", response_model=list[SaleResponse])
def list_sales(
    search: str | None = Query(None, description="Filter by customer name"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Full sales history, newest first."""
    return sale_service.list_sales(db, search=search)


@router.get("/partial-payments", response_model=list[SaleResponse])
def list_partial_payments(
    search: str | None = Query(None, description="Customer name, invoice id or phone"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Open tabs: Partial Payment sales that still have a balance."""
    return sale_service.list_open_sales(db, search=search)


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(sale_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _call(sale_service.get_sale, db, sale_id)


@router.get("/{sale_id}/invoice")
def download_invoice(sale_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Printable PDF invoice, current balance included."""
    sale = _call(sale_service.get_sale, db, sale_id)
    pdf = receipt_service.render_invoice_pdf(sale)
    return StreamingResponse(
        pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{sale.invoice_id}.pdf"'},
    )


@router.post("", response_model=SaleResponse, status_code=201)
def create_sale(
    data: SaleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Always records a new invoice, even for a customer with an open tab."""
    sale = _call(sale_service.create_sale, db, data, created_by=current_user.id)
    AuditLog.log_action("create", "sale", sale.id, current_user, changes=_money_snapshot(sale))
    return sale


@router.post("/checkout", response_model=CheckoutResponse, status_code=201)
def checkout(
    data: SaleCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Till checkout: Half Payment for a customer with an open tab extends that tab."""
    sale, consolidated = _call(sale_service.checkout, db, data, created_by=current_user.id)
    if consolidated:
        response.status_code = status.HTTP_200_OK
    AuditLog.log_action(
        "consolidate" if consolidated else "create", "sale", sale.id, current_user,
        changes=_money_snapshot(sale),
    )
    return CheckoutResponse(consolidated=consolidated, sale=SaleResponse.model_validate(sale))


@router.put("/{sale_id}/payment", response_model=SaleResponse)
def apply_payment(
    sale_id: int,
    data: PaymentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = _call(sale_service.apply_payment, db, sale_id, data.additional_payment)
    AuditLog.log_action("payment", "sale", sale.id, current_user, changes=_money_snapshot(sale))
    return sale


@router.put("/{sale_id}/debt", response_model=SaleResponse)
def add_debt(
    sale_id: int,
    data: DebtRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = _call(sale_service.add_debt, db, sale_id, data.additional_debt)
    AuditLog.log_action("debt", "sale", sale.id, current_user, changes=_money_snapshot(sale))
    return sale


@router.put("/{sale_id}/consolidate", response_model=SaleResponse)
def consolidate(
    sale_id: int,
    data: ConsolidateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Merge new items and a payment into an existing open sale."""
    sale = _call(
        sale_service.consolidate_sale, db, sale_id, data.additional_payment, data.new_items,
        idempotency_key=data.idempotency_key,
    )
    AuditLog.log_action("consolidate", "sale", sale.id, current_user, changes=_money_snapshot(sale))
    return sale
