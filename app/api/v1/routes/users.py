# app/api/v1/routes/users.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.core.auth import User, UserRead, UserUpdate
from app.core.database import get_async_session
from app.api.deps import get_current_user

router = APIRouter(tags=["User Management"])
logger = logging.getLogger(__name__)

# Fields a user may change on their own profile here; credentials go through fastapi-users
PROFILE_FIELDS = {"full_name"}

@router.get("/me", response_model=UserRead)
async def read_own_profile(user: User = Depends(get_current_user)):
    """Get current user's profile"""
    return user

@router.patch("/me", response_model=UserRead)
async def update_own_profile(
    user_update: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Update current user's profile"""
    update_dict = {
        k: v for k, v in user_update.model_dump(exclude_unset=True).items()
        if k in PROFILE_FIELDS
    }
    if not update_dict:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields provided for update"
        )

    try:
        for field, value in update_dict.items():
            setattr(user, field, value)
        db.add(user)
        await db.commit()
        await db.refresh(user)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Profile update failed for {user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while updating profile"
        )
    return user
