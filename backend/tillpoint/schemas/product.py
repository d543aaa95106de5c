from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel

from tillpoint.models.enums import ProductCategory


class ProductCreate(BaseModel):
    name: str
    category: ProductCategory
    price: Decimal
    stock: int
    min_stock: int = 0
    supplier: Optional[str] = None
    image: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[ProductCategory] = None
    price: Optional[Decimal] = None
    stock: Optional[int] = None
    min_stock: Optional[int] = None
    supplier: Optional[str] = None
    image: Optional[str] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    category: str
    price: Decimal
    stock: int
    min_stock: int
    status: str
    supplier: Optional[str] = None
    image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
