# app/models/recurring_transaction.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Float, Date, DateTime, Boolean, Integer, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base

FREQUENCIES = ("daily", "weekly", "monthly", "yearly")

class RecurringTransaction(Base):
    __tablename__ = "recurring_transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Template for the generated transactions
    type = Column(String(length=10), nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(String(length=500), nullable=False)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)

    # Schedule
    frequency = Column(String(length=10), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    day_of_month = Column(Integer, nullable=True)  # 1-31, monthly only
    day_of_week = Column(Integer, nullable=True)   # 0=Monday .. 6=Sunday, weekly only

    is_active = Column(Boolean, default=True, nullable=False)
    # Last calendar date a transaction was generated for
    last_generated_date = Column(Date, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=None, onupdate=datetime.utcnow)

    category = relationship("Category", lazy="joined")

    @property
    def category_name(self):
        return self.category.name if self.category else None

    def __repr__(self):
        return (
            f"<RecurringTransaction {self.frequency} amount={self.amount} "
            f"last_generated={self.last_generated_date} user_id={self.user_id}>"
        )
