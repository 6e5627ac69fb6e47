# app/core/auth.py

import uuid
import logging
from datetime import datetime
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers, BaseUserManager, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase
from fastapi_users import schemas
from pydantic import ConfigDict

from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base, get_async_session
from .config import settings

logger = logging.getLogger(__name__)

# Audience written into every access token by the JWT strategy
TOKEN_AUDIENCE = ["fastapi-users:auth"]

# 1. User DB model
class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(length=320), unique=True, index=True, nullable=False)
    hashed_password = Column(String(length=1024), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    full_name = Column(String(length=255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<User email={self.email}>"

# 2. Pydantic schemas
class UserRead(schemas.BaseUser[uuid.UUID]):
    full_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class UserCreate(schemas.BaseUserCreate):
    full_name: Optional[str] = None

class UserUpdate(schemas.BaseUserUpdate):
    full_name: Optional[str] = None

# 3. User Manager
class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.SECRET_KEY
    verification_token_secret = settings.SECRET_KEY

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        # Imported here: crud modules import the models, which import this module
        from app.crud.category import seed_default_categories_for_user
        from app.utils.email import send_email_via_sendgrid

        logger.info(f"User {user.email} has registered. Seeding default categories…")
        created = await seed_default_categories_for_user(user.id, self.user_db.session)
        logger.info(f"Created {len(created)} default categories for {user.email}")

        if not settings.email_enabled:
            return

        subject = "👋 Welcome to CleverBudget"
        html_body = """
        <div style="max-width: 600px; margin: 0 auto; font-family: Arial, sans-serif;">
            <h2 style="color: #007bff;">Welcome to CleverBudget!</h2>
            <p>Hello <strong>{user_name}</strong>,</p>
            <p>Your account is ready. Start by setting a budget for this month and
            adding your recurring bills so we can track them for you.</p>
            <p><a href="{frontend}">Open CleverBudget</a></p>
        </div>
        """.format(
            user_name=user.full_name or user.email.split('@')[0],
            frontend=settings.FRONTEND_URL,
        )
        if not await send_email_via_sendgrid(user.email, subject, html_body):
            logger.error(f"❌ Failed to send welcome email to {user.email}")

    async def on_after_forgot_password(self, user: User, token: str, request: Optional[Request] = None):
        from app.utils.email import send_email_via_sendgrid

        logger.info(f"Password reset requested for user {user.email}. Token: {token[:10]}...")
        reset_url = f"{settings.FRONTEND_URL}/reset-password?token={token}"

        html_body = """
        <div style="max-width: 600px; margin: 0 auto; font-family: Arial, sans-serif;">
            <h2 style="color: #333;">Password Reset Request</h2>
            <p>Hello <strong>{user_name}</strong>,</p>
            <p>Use the link below to choose a new password. It expires in 1 hour.</p>
            <p><a href="{reset_link}">{reset_link}</a></p>
            <p style="color: #999;">If you didn't request this, you can ignore this email.</p>
        </div>
        """.format(
            user_name=user.full_name or user.email.split('@')[0],
            reset_link=reset_url,
        )
        if await send_email_via_sendgrid(user.email, "🔑 Reset your CleverBudget password", html_body):
            logger.info(f"✅ Password reset email sent successfully to {user.email}")
        else:
            logger.error(f"❌ Failed to send password reset email to {user.email}")

    async def on_after_reset_password(self, user: User, request: Optional[Request] = None):
        logger.info(f"Password reset completed for user {user.email}")

# 4. User Database
async def get_user_db(session: AsyncSession = Depends(get_async_session)):
    yield SQLAlchemyUserDatabase(session, User)

# 5. User Manager dependency
async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)

# 6. Authentication
bearer_transport = BearerTransport(tokenUrl="/api/v1/auth/jwt/login")

def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        token_audience=TOKEN_AUDIENCE,
        algorithm=settings.ALGORITHM,
    )

auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

# 7. FastAPI Users instance
fastapi_users = FastAPIUsers[User, uuid.UUID](get_user_manager, [auth_backend])

__all__ = [
    "fastapi_users",
    "auth_backend",
    "get_user_db",
    "get_user_manager",
    "User",
    "UserRead",
    "UserCreate",
    "UserUpdate",
    "TOKEN_AUDIENCE",
]
