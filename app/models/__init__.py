# app/models/__init__.py
# Import every model so relationship() strings resolve and Base.metadata is complete.
from app.models.user import User
from app.models.category import Category
from app.models.recurring_transaction import RecurringTransaction
from app.models.transaction import Transaction
from app.models.budget import Budget
from app.models.goal import Goal
from app.models.notification import Notification

__all__ = [
    "User",
    "Category",
    "RecurringTransaction",
    "Transaction",
    "Budget",
    "Goal",
    "Notification",
]
