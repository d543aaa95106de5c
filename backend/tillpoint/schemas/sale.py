"""
Sale request/response models.

Cart lines may carry the price, name and total the till displayed; the
server ignores them and prices every line from the stored product.
Money goes out as Decimal, which pydantic renders as a string in JSON.
"""
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel

from tillpoint.models.enums import PaymentMethod


class CartLine(BaseModel):
    product_id: int
    quantity: int
    # Display hints only
    name: Optional[str] = None
    price: Optional[Decimal] = None
    total: Optional[Decimal] = None


class SaleCreate(BaseModel):
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    items: List[CartLine] = []
    payment_method: PaymentMethod
    # Required for Half Payment, ignored otherwise
    amount_paid: Optional[Decimal] = None
    idempotency_key: Optional[str] = None


class PaymentRequest(BaseModel):
    additional_payment: Optional[Decimal] = None


class DebtRequest(BaseModel):
    additional_debt: Optional[Decimal] = None


class ConsolidateRequest(BaseModel):
    additional_payment: Optional[Decimal] = None
    new_items: List[CartLine] = []
    idempotency_key: Optional[str] = None


class SaleItemResponse(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: Decimal
    total: Decimal


class SaleResponse(BaseModel):
    id: int
    invoice_id: str
    customer_name: str
    customer_phone: Optional[str] = None
    items: List[SaleItemResponse]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    amount_paid: Decimal
    remaining_balance: Decimal
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CheckoutResponse(BaseModel):
    consolidated: bool
    sale: SaleResponse
