# app/models/goal.py
import uuid
from datetime import datetime
from sqlalchemy import Column, Float, DateTime, ForeignKey, Integer, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class Goal(Base):
    """Monthly spending target for a single category."""
    __tablename__ = "goals"
    __table_args__ = (
        UniqueConstraint("user_id", "category_id", "month", "year", name="uq_goal_user_category_period"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    target_amount = Column(Float, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    category = relationship("Category", lazy="joined")

    @property
    def category_name(self):
        return self.category.name if self.category else None

    def __repr__(self):
        return f"<Goal target={self.target_amount} period={self.year}-{self.month:02d} user_id={self.user_id}>"
