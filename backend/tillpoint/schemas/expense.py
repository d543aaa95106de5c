from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel

from tillpoint.models.enums import ExpenseCategory


class ExpenseCreate(BaseModel):
    description: str
    amount: Decimal
    category: ExpenseCategory
    date: datetime
    notes: Optional[str] = None


class ExpenseUpdate(ExpenseCreate):
    """Full replacement: every required field must be sent again."""


class ExpenseResponse(BaseModel):
    id: int
    description: str
    amount: Decimal
    category: str
    date: datetime
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
