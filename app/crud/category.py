# app/crud/category.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from app.models.category import Category
from app.models.transaction import Transaction
from app.models.recurring_transaction import RecurringTransaction
from app.models.budget import Budget
from app.models.goal import Goal
from typing import List, Optional
import uuid
from app.schemas.category import CategoryCreate, CategoryUpdate

async def get_categories_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Category]:
    result = await db.execute(
        select(Category).where(Category.user_id == user_id).order_by(Category.name)
    )
    return result.scalars().all()

async def get_category_by_id(category_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.user_id == user_id)
    )
    return result.scalar_one_or_none()

async def get_category_by_name_for_user(name: str, user_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    """Case-insensitive lookup of a category by name for a given user."""
    result = await db.execute(
        select(Category).where(
            Category.user_id == user_id,
            func.lower(Category.name) == func.lower(name),
        )
    )
    return result.scalar_one_or_none()

async def create_category_for_user(user_id: uuid.UUID, cat_in: CategoryCreate, db: AsyncSession) -> Category:
    new_cat = Category(**cat_in.model_dump(), user_id=user_id, is_default=False)
    db.add(new_cat)
    await db.commit()
    await db.refresh(new_cat)
    return new_cat

async def update_category(category: Category, cat_in: CategoryUpdate, db: AsyncSession) -> Category:
    for field, value in cat_in.model_dump(exclude_unset=True).items():
        setattr(category, field, value)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category

async def delete_category(category: Category, db: AsyncSession) -> None:
    await db.delete(category)
    await db.commit()

async def category_in_use(category_id: uuid.UUID, db: AsyncSession) -> bool:
    """True if any transaction, recurring definition, budget or goal references the category."""
    for model in (Transaction, RecurringTransaction, Budget, Goal):
        result = await db.execute(
            select(func.count()).select_from(model).where(model.category_id == category_id)
        )
        if result.scalar_one():
            return True
    return False


# Default categories to be created for every new user
DEFAULT_CATEGORIES: List[dict] = [
    {"name": "Salary", "icon": "💼", "color": "#4CAF50"},
    {"name": "Food", "icon": "🍔", "color": "#FF9800"},
    {"name": "Housing", "icon": "🏠", "color": "#3F51B5"},
    {"name": "Transport", "icon": "🚗", "color": "#03A9F4"},
    {"name": "Health", "icon": "💊", "color": "#E91E63"},
    {"name": "Entertainment", "icon": "🎬", "color": "#9C27B0"},
    {"name": "Shopping", "icon": "🛍️", "color": "#FFC107"},
    {"name": "Others", "icon": "📦", "color": "#607D8B"},
]

async def seed_default_categories_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Category]:
    """Ensure the user has the default categories; create missing ones.

    Returns the list of categories that were created (empty if none were needed).
    """
    result = await db.execute(select(Category.name).where(Category.user_id == user_id))
    existing_names_lower = {row[0].lower() for row in result.all()}

    categories_to_create: List[Category] = [
        Category(user_id=user_id, name=cat["name"], icon=cat["icon"], color=cat["color"], is_default=True)
        for cat in DEFAULT_CATEGORIES
        if cat["name"].lower() not in existing_names_lower
    ]

    if categories_to_create:
        db.add_all(categories_to_create)
        await db.commit()
        for c in categories_to_create:
            await db.refresh(c)

    return categories_to_create
