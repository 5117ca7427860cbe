"""API routes for blog likes"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.database import get_db
from app.models.blog import LikeToggle, LikeStatusEnvelope
from app.models.user import User
from app.routes.auth import get_current_user, get_optional_user
from app.services.like_service import like_service

router = APIRouter(prefix="/api/blog-like", tags=["likes"])


@router.post("/do-like", response_model=LikeStatusEnvelope)
async def toggle_like(
    data: LikeToggle,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Like a blog, or remove the like if the user already liked it"""
    count, liked = await like_service.toggle(db, data.blog_id, current_user)
    return LikeStatusEnvelope(likecount=count, isUserliked=liked)


@router.get("/get-like/{blog_id}", response_model=LikeStatusEnvelope)
async def get_likes(
    blog_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user)
):
    """Like count; isUserliked is only meaningful for signed-in users"""
    count, liked = await like_service.status(db, blog_id, current_user)
    return LikeStatusEnvelope(likecount=count, isUserliked=liked)
