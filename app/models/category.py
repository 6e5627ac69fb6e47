# app/models/category.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Boolean, DateTime, Uuid, UniqueConstraint
from app.core.database import Base

class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_category_user_name"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(length=100), nullable=False)
    icon = Column(String(length=50), nullable=True)
    color = Column(String(length=7), nullable=True)   # "#RRGGBB"
    is_default = Column(Boolean(), default=False, nullable=False)  # True for seeded categories

    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Category name={self.name} user_id={self.user_id}>"
