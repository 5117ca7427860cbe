"""API routes for user profiles"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserUpdate, UserResponse, UserEnvelope, UserListEnvelope
from app.routes.auth import get_current_user, get_current_admin_user
from app.services.user_service import user_service

router = APIRouter(prefix="/api/user", tags=["users"])


@router.get("/get-all-user", response_model=UserListEnvelope)
async def get_all_users(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    users = await user_service.list_users(db)
    return UserListEnvelope(user=[UserResponse.model_validate(u) for u in users])


@router.get("/get-user/{user_id}", response_model=UserEnvelope)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = await user_service.get_user(db, user_id)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.put("/update-user/{user_id}", response_model=UserEnvelope)
async def update_user(
    user_id: int,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Partial profile update; users edit themselves, admins edit anyone"""
    user = await user_service.update_user(db, user_id, data, current_user)
    return UserEnvelope(message="Data updated.", user=UserResponse.model_validate(user))


@router.delete("/delete/{user_id}")
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Delete a user together with their blogs, comments and likes"""
    await user_service.delete_user(db, user_id, current_user)
    return {"success": True, "message": "User deleted successfully."}
