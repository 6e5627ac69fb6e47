# app/models/budget.py
import uuid
from datetime import datetime
from sqlalchemy import Column, ForeignKey, Float, DateTime, Boolean, Integer, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

# Alert thresholds in percent of the budget amount, in firing order
ALERT_THRESHOLDS = (50, 80, 100)

class Budget(Base):
    __tablename__ = "budgets"
    __table_args__ = (
        UniqueConstraint("user_id", "category_id", "month", "year", name="uq_budget_user_category_period"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    amount = Column(Float, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    alert_at_50 = Column(Boolean, default=True, nullable=False)
    alert_at_80 = Column(Boolean, default=True, nullable=False)
    alert_at_100 = Column(Boolean, default=True, nullable=False)

    # Set once per period by the alert worker, never reset
    alert_50_sent = Column(Boolean, default=False, nullable=False)
    alert_80_sent = Column(Boolean, default=False, nullable=False)
    alert_100_sent = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=None, onupdate=datetime.utcnow)

    category = relationship("Category", lazy="joined")

    @property
    def category_name(self):
        return self.category.name if self.category else None

    def alert_enabled(self, threshold: int) -> bool:
        return bool(getattr(self, f"alert_at_{threshold}"))

    def alert_sent(self, threshold: int) -> bool:
        return bool(getattr(self, f"alert_{threshold}_sent"))

    def __repr__(self):
        return f"<Budget amount={self.amount} period={self.year}-{self.month:02d} user_id={self.user_id}>"
