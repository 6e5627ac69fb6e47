"""
Pytest fixtures for the CleverBudget API tests.

Every test gets its own SQLite file database. A file (rather than an
in-memory database) is used because the background workers and the
notifier open sessions of their own next to the one the test holds.
"""
import os

os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import uuid
from datetime import date

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from app.main import app
from app.api.deps import get_current_user
from app.core.clock import FixedClock, get_clock
from app.core.database import Base, get_async_session
from app.models import User, Category, Budget, Transaction, RecurringTransaction

TODAY = date(2024, 4, 15)


@pytest.fixture
async def engine(tmp_path):
    """Fresh database with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'clever_budget_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    """Clock pinned to 2024-04-15."""
    return FixedClock(TODAY)


@pytest.fixture
async def test_user(db_session) -> User:
    user = User(
        id=uuid.uuid4(),
        email="testuser@example.com",
        hashed_password="not-a-real-hash",
        full_name="Test User",
        is_active=True,
        is_superuser=False,
        is_verified=True,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def test_category(db_session, test_user) -> Category:
    category = Category(user_id=test_user.id, name="Food", icon="🍔", color="#FF9800")
    db_session.add(category)
    await db_session.commit()
    await db_session.refresh(category)
    return category


@pytest.fixture
def add_expense(db_session, test_user, test_category):
    """Factory inserting an expense in the test category."""
    async def _add(amount: float, on: date, category_id=None, type: str = "expense") -> Transaction:
        tx = Transaction(
            user_id=test_user.id,
            type=type,
            description="Test expense",
            amount=amount,
            category_id=category_id or test_category.id,
            transaction_date=on,
        )
        db_session.add(tx)
        await db_session.commit()
        return tx
    return _add


@pytest.fixture
def add_budget(db_session, test_user, test_category):
    """Factory inserting a budget for the test category."""
    async def _add(amount: float, month: int = TODAY.month, year: int = TODAY.year, **flags) -> Budget:
        budget = Budget(
            user_id=test_user.id,
            category_id=test_category.id,
            amount=amount,
            month=month,
            year=year,
            **flags,
        )
        db_session.add(budget)
        await db_session.commit()
        return budget
    return _add


@pytest.fixture
def add_recurring(db_session, test_user, test_category):
    """Factory inserting a recurring definition; defaults to a monthly expense."""
    async def _add(**fields) -> RecurringTransaction:
        values = dict(
            user_id=test_user.id,
            type="expense",
            amount=50.0,
            description="Gym membership",
            category_id=test_category.id,
            frequency="monthly",
            start_date=date(2024, 1, 15),
            day_of_month=15,
            is_active=True,
        )
        values.update(fields)
        rec = RecurringTransaction(**values)
        db_session.add(rec)
        await db_session.commit()
        return rec
    return _add


@pytest.fixture
async def client(session_factory, test_user, clock):
    """HTTP client authenticated as ``test_user`` with the clock pinned."""
    async def override_get_async_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_current_user] = lambda: test_user
    app.dependency_overrides[get_clock] = lambda: clock
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
