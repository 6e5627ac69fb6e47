# app/schemas/insight.py
from typing import List, Literal, Optional
from pydantic import BaseModel
from datetime import datetime

InsightCategory = Literal["spending_pattern", "budget_risk", "income_pattern"]
InsightSeverity = Literal["low", "medium", "high", "critical"]

class InsightDataPoint(BaseModel):
    label: str
    value: float
    benchmark: Optional[float] = None

class FinancialInsight(BaseModel):
    category: InsightCategory
    severity: InsightSeverity
    title: str
    summary: str
    recommendation: str
    impact_amount: Optional[float] = None
    benchmark_amount: Optional[float] = None
    generated_at: datetime
    data_points: List[InsightDataPoint] = []
