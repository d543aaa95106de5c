"""
Analytics API - figures for the owner's reports and the till dashboard.

- /summary: revenue, profit, top products, categories (admin only)
- /dashboard: cards for the home screen
- /outstanding: debt owed across open tabs

Every figure is recomputed from the full tables on each request.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tillpoint.api.deps import get_db, get_current_user, require_admin
from tillpoint.core.time_utils import utcnow
from tillpoint.models.expense import Expense
from tillpoint.models.product import Product
from tillpoint.models.sale import Sale
from tillpoint.models.user import User
from tillpoint.schemas.analytics import AnalyticsSummary, DashboardStats, OutstandingSummary
from tillpoint.services import analytics_service, sale_service

router = APIRouter()


@router.get("/summary", response_model=AnalyticsSummary)
def get_analytics_summary(
    days: Optional[int] = Query(None, ge=1, description="Only the last N days"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Revenue, expenses and net profit, with the breakdowns behind them.
    Without `days` the whole history is used.
    """
    sales = db.query(Sale).all()
    products = db.query(Product).order_by(Product.id).all()
    expenses = db.query(Expense).all()
    if days is not None:
        sales, expenses = analytics_service.within_window(sales, expenses, days, utcnow())
    return analytics_service.summarize(sales, products, expenses)


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    sales = db.query(Sale).all()
    products = db.query(Product).order_by(Product.id).all()
    return analytics_service.dashboard(sales, products, today=utcnow().date())


@router.get("/outstanding", response_model=OutstandingSummary)
def get_outstanding(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics_service.outstanding(sale_service.list_open_sales(db))
