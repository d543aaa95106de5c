from typing import List
from decimal import Decimal
from pydantic import BaseModel

from tillpoint.schemas.product import ProductResponse
from tillpoint.schemas.sale import SaleResponse


class ProductPerformance(BaseModel):
    name: str
    revenue: Decimal
    units: int


class CategoryPerformance(BaseModel):
    category: str
    revenue: Decimal
    percentage: float


class ExpenseCategoryTotal(BaseModel):
    category: str
    amount: Decimal


class AnalyticsSummary(BaseModel):
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    total_units: int
    average_order_value: Decimal
    total_customers: int
    top_products: List[ProductPerformance]
    category_performance: List[CategoryPerformance]
    low_stock: List[ProductResponse]
    expenses_by_category: List[ExpenseCategoryTotal]


class DashboardStats(BaseModel):
    total_products: int
    total_sales: Decimal
    low_stock_count: int
    today_sales: Decimal
    low_stock: List[ProductResponse]
    recent_sales: List[SaleResponse]


class OutstandingSummary(BaseModel):
    total_outstanding: Decimal
    open_tabs: int
    average_debt: Decimal
