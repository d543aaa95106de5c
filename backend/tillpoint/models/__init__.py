from tillpoint.models.user import User
from tillpoint.models.product import Product
from tillpoint.models.sale import Sale
from tillpoint.models.expense import Expense
from tillpoint.models.counter import Counter
from tillpoint.models.idempotency import AppliedKey

__all__ = ["User", "Product", "Sale", "Expense", "Counter", "AppliedKey"]
