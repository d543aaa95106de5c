"""
Analytics - pure reductions over already-loaded sales, products and expenses.

Nothing here touches the database. Routes load the full collections and
hand them in; every figure is recomputed on each request.

Products are grouped by the *name* snapshot on sale items, so two catalogue
entries with the same display name are reported as one product.
"""
from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from tillpoint.core.config import settings
from tillpoint.services.sale_service import to_money

ZERO = Decimal("0")


def _items(sale) -> list[dict]:
    return sale.items or []


def within_window(sales: Sequence, expenses: Sequence, days: int, now: datetime) -> tuple[list, list]:
    """Keep sales created and expenses dated within the last `days` days."""
    cutoff = now - timedelta(days=days)
    recent_sales = [s for s in sales if s.created_at is not None and s.created_at >= cutoff]
    recent_expenses = [e for e in expenses if e.date is not None and e.date >= cutoff]
    return recent_sales, recent_expenses


def total_revenue(sales: Iterable) -> Decimal:
    return sum((to_money(s.total) for s in sales), ZERO)


def top_products(sales: Iterable, limit: int) -> list[dict]:
    by_name: OrderedDict[str, dict] = OrderedDict()
    for sale in sales:
        for item in _items(sale):
            entry = by_name.setdefault(item["name"], {"name": item["name"], "revenue": ZERO, "units": 0})
            entry["revenue"] += to_money(item["total"])
            entry["units"] += int(item["quantity"])
    ranked = sorted(by_name.values(), key=lambda e: e["revenue"], reverse=True)
    return ranked[:limit]


def category_performance(sales: Sequence, products: Sequence, revenue: Decimal) -> list[dict]:
    """Item revenue per product category, with its share of total revenue.

    Every category present in the catalogue is listed, even at zero.
    Items whose name matches no current product are not attributed.
    """
    category_of: dict[str, str] = {}
    totals: OrderedDict[str, Decimal] = OrderedDict()
    for product in products:
        category_of.setdefault(product.name, product.category)
        totals.setdefault(product.category, ZERO)

    for sale in sales:
        for item in _items(sale):
            category = category_of.get(item["name"])
            if category is not None:
                totals[category] += to_money(item["total"])

    rows = [
        {
            "category": category,
            "revenue": amount,
            "percentage": round(float(amount / revenue * 100), 2) if revenue > 0 else 0.0,
        }
        for category, amount in totals.items()
    ]
    return sorted(rows, key=lambda r: r["revenue"], reverse=True)


def low_stock(products: Iterable) -> list:
    return [p for p in products if p.stock <= p.min_stock]


def expenses_by_category(expenses: Iterable) -> list[dict]:
    totals: OrderedDict[str, Decimal] = OrderedDict()
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + to_money(expense.amount)
    rows = [{"category": c, "amount": a} for c, a in totals.items()]
    return sorted(rows, key=lambda r: r["amount"], reverse=True)


def summarize(sales: Sequence, products: Sequence, expenses: Sequence, top_n: int | None = None) -> dict:
    """Revenue, profit, units, customers, top products, categories, low stock."""
    revenue = total_revenue(sales)
    spent = sum((to_money(e.amount) for e in expenses), ZERO)
    units = sum(int(item["quantity"]) for sale in sales for item in _items(sale))
    average = to_money(revenue / len(sales)) if sales else ZERO

    return {
        "total_revenue": revenue,
        "total_expenses": spent,
        "net_profit": revenue - spent,
        "total_units": units,
        "average_order_value": average,
        "total_customers": len({s.customer_name for s in sales}),
        "top_products": top_products(sales, top_n or settings.TOP_PRODUCTS_LIMIT),
        "category_performance": category_performance(sales, products, revenue),
        "low_stock": low_stock(products),
        "expenses_by_category": expenses_by_category(expenses),
    }


def dashboard(sales: Sequence, products: Sequence, today: date, recent_limit: int | None = None) -> dict:
    """Cards for the till's home screen."""
    alerts = low_stock(products)
    newest_first = sorted(
        sales,
        key=lambda s: (s.created_at or datetime.min, s.id or 0),
        reverse=True,
    )
    return {
        "total_products": len(products),
        "total_sales": total_revenue(sales),
        "low_stock_count": len(alerts),
        "today_sales": total_revenue(
            s for s in sales if s.created_at is not None and s.created_at.date() == today
        ),
        "low_stock": alerts,
        "recent_sales": newest_first[: recent_limit or settings.RECENT_SALES_LIMIT],
    }


def outstanding(open_sales: Sequence) -> dict:
    """Debt owed across open tabs."""
    owed = sum((to_money(s.remaining_balance) for s in open_sales), ZERO)
    return {
        "total_outstanding": owed,
        "open_tabs": len(open_sales),
        "average_debt": to_money(owed / len(open_sales)) if open_sales else ZERO,
    }
