# app/schemas/report.py
from typing import List, Optional
from pydantic import BaseModel
from datetime import date
import uuid

class ReportSummary(BaseModel):
    start_date: date
    end_date: date
    total_income: float
    total_expenses: float
    balance: float
    transactions_count: int
    income_change_percentage: float
    expense_change_percentage: float
    average_daily_expense: float
    savings_rate: float

class CategoryReportItem(BaseModel):
    category_id: uuid.UUID
    category_name: str
    total: float
    transactions_count: int
    percentage: float

class CategoryReport(BaseModel):
    start_date: date
    end_date: date
    type: str
    total: float
    categories: List[CategoryReportItem]

class MonthlyReportItem(BaseModel):
    month: int
    year: int
    income: float
    expenses: float
    balance: float

class MonthlyReport(BaseModel):
    year: int
    months: List[MonthlyReportItem]
    total_income: float
    total_expenses: float
    best_month: Optional[int] = None
