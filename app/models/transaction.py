# app/models/transaction.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Float, Date, DateTime, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from app.core.database import Base

TRANSACTION_TYPES = ("income", "expense")

class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        # A recurring definition materializes at most one transaction per date
        UniqueConstraint("recurring_transaction_id", "transaction_date", name="uq_transaction_recurring_date"),
        Index("ix_transactions_user_date", "user_id", "transaction_date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(length=10), nullable=False)  # "income" | "expense"
    description = Column(String(length=500), nullable=False)
    amount = Column(Float, nullable=False)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    transaction_date = Column(Date, nullable=False)
    recurring_transaction_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("recurring_transactions.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=None, onupdate=datetime.utcnow)

    category = relationship("Category", lazy="joined")

    @property
    def category_name(self):
        return self.category.name if self.category else None

    def __repr__(self):
        return f"<Transaction {self.type} amount={self.amount} date={self.transaction_date} user_id={self.user_id}>"
