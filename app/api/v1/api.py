# app/api/v1/api.py
from fastapi import APIRouter

from app.api.v1.routes import (
    users,
    categories,
    transactions,
    recurring_transactions,
    budgets,
    goals,
    reports,
    insights,
    notification,
)

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users")
api_router.include_router(categories.router)
api_router.include_router(transactions.router)
api_router.include_router(recurring_transactions.router)
api_router.include_router(budgets.router)
api_router.include_router(goals.router)
api_router.include_router(reports.router)
api_router.include_router(insights.router)
api_router.include_router(notification.router, prefix="/notification", tags=["Notifications"])
