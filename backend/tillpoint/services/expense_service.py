"""Expenses: outgoing money, used only for profit in analytics."""
import logging

from sqlalchemy.orm import Session

from tillpoint.core.exceptions import InvalidRequestError, NotFoundError
from tillpoint.core.time_utils import to_naive_utc
from tillpoint.models.expense import Expense
from tillpoint.schemas.expense import ExpenseCreate, ExpenseUpdate
from tillpoint.services.concurrency import run_in_transaction

logger = logging.getLogger(__name__)


def _validate(data: ExpenseCreate):
    if not data.description or not data.description.strip():
        raise InvalidRequestError("Missing required fields")
    if data.amount is None or data.amount <= 0:
        raise InvalidRequestError("Expense amount must be positive")


def get_expense(db: Session, expense_id: int) -> Expense:
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise NotFoundError("Expense", expense_id)
    return expense


def list_expenses(db: Session) -> list[Expense]:
    return db.query(Expense).order_by(Expense.date.desc(), Expense.id.desc()).all()


def create_expense(db: Session, data: ExpenseCreate) -> Expense:
    _validate(data)

    def _create() -> Expense:
        expense = Expense(
            description=data.description.strip(),
            amount=data.amount,
            category=data.category.value,
            date=to_naive_utc(data.date),
            notes=data.notes,
        )
        db.add(expense)
        db.flush()
        return expense

    expense = run_in_transaction(db, _create)
    logger.info(f"Recorded expense {expense.id}: {expense.amount} ({expense.category})")
    return expense


def update_expense(db: Session, expense_id: int, data: ExpenseUpdate) -> Expense:
    _validate(data)

    def _update() -> Expense:
        expense = get_expense(db, expense_id)
        expense.description = data.description.strip()
        expense.amount = data.amount
        expense.category = data.category.value
        expense.date = to_naive_utc(data.date)
        expense.notes = data.notes
        db.flush()
        return expense

    return run_in_transaction(db, _update)


def delete_expense(db: Session, expense_id: int) -> None:
    def _delete():
        db.delete(get_expense(db, expense_id))
        db.flush()

    run_in_transaction(db, _delete)
    logger.info(f"Deleted expense {expense_id}")
