"""API routes for comments"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.blog import (
    CommentCreate, CommentResponse, CommentEnvelope, CommentListEnvelope, CommentCountEnvelope,
)
from app.models.user import User
from app.routes.auth import get_current_user
from app.services.comment_service import comment_service

router = APIRouter(prefix="/api/comment", tags=["comments"])


@router.post("/add", response_model=CommentEnvelope, status_code=201)
async def add_comment(
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    comment = await comment_service.add_comment(db, data, current_user)
    return CommentEnvelope(message="Comment submitted.", comment=CommentResponse.model_validate(comment))


@router.get("/get/{blog_id}", response_model=CommentListEnvelope)
async def get_comments(blog_id: int, db: AsyncSession = Depends(get_db)):
    """Comments on a blog, newest first"""
    comments = await comment_service.list_for_blog(db, blog_id)
    return CommentListEnvelope(comments=[CommentResponse.model_validate(c) for c in comments])


@router.get("/get-count/{blog_id}", response_model=CommentCountEnvelope)
async def get_comment_count(blog_id: int, db: AsyncSession = Depends(get_db)):
    return CommentCountEnvelope(commentCount=await comment_service.count_for_blog(db, blog_id))


@router.get("/get-all-comment", response_model=CommentListEnvelope)
async def get_all_comments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Every comment for admins; comments on their own blogs for authors"""
    comments = await comment_service.list_all(db, current_user)
    return CommentListEnvelope(comments=[CommentResponse.model_validate(c) for c in comments])


@router.delete("/delete/{comment_id}")
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await comment_service.delete_comment(db, comment_id, current_user)
    return {"success": True, "message": "Comment deleted successfully."}
