from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tillpoint.api.deps import get_db, get_current_user, require_admin
from tillpoint.core.audit import AuditLog
from tillpoint.core.exceptions import BusinessError, DomainError
from tillpoint.models.user import User
from tillpoint.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseUpdate
from tillpoint.services import expense_service

router = APIRouter()


@router.get("", response_model=list[ExpenseResponse])
def list_expenses(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return expense_service.list_expenses(db)


@router.post("", response_model=ExpenseResponse, status_code=201)
def create_expense(
    data: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        expense = expense_service.create_expense(db, data)
    except DomainError as e:
        raise BusinessError.from_domain(e)
    AuditLog.log_action(
        "create", "expense", expense.id, current_user,
        changes={"amount": expense.amount, "category": expense.category},
    )
    return expense


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: int,
    data: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        expense = expense_service.update_expense(db, expense_id, data)
    except DomainError as e:
        raise BusinessError.from_domain(e)
    AuditLog.log_action("update", "expense", expense_id, current_user, changes=data.model_dump(mode="json"))
    return expense


@router.delete("/{expense_id}")
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        expense_service.delete_expense(db, expense_id)
    except DomainError as e:
        raise BusinessError.from_domain(e)
    AuditLog.log_action("delete", "expense", expense_id, current_user)
    return {"message": "Expense deleted successfully", "id": expense_id}
