"""Service for user profiles"""
import logging
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError, PermissionDeniedError, ValidationError
from app.models.blog import Blog, Comment, BlogLike
from app.models.category_request import CategoryRequest
from app.models.user import User, UserUpdate
from app.services.auth import auth_service

logger = logging.getLogger(__name__)


class UserService:

    async def get_user(self, db: AsyncSession, user_id: int) -> User:
        user = await db.scalar(select(User).where(User.id == user_id))
        if not user:
            raise NotFoundError("User not found.")
        return user

    async def list_users(self, db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
        return list(result.scalars().all())

    async def update_user(self, db: AsyncSession, user_id: int, data: UserUpdate, current_user: User) -> User:
        if not current_user.is_admin and current_user.id != user_id:
            raise PermissionDeniedError("You can only update your own profile.")

        user = await self.get_user(db, user_id)
        changes = data.model_dump(exclude_unset=True)

        if "name" in changes:
            if not changes["name"] or not changes["name"].strip():
                raise ValidationError("Name cannot be empty.")
            user.name = changes["name"].strip()
        if "bio" in changes:
            user.bio = changes["bio"]
        if "avatar" in changes:
            user.avatar = changes["avatar"]
        if changes.get("password"):
            user.hashed_password = auth_service.get_password_hash(changes["password"])

        await db.commit()
        await db.refresh(user)
        logger.info(f"User {user.id} profile updated by {current_user.id}")
        return user

    async def delete_user(self, db: AsyncSession, user_id: int, current_user: User) -> None:
        user = await self.get_user(db, user_id)
        if user.id == current_user.id:
            raise ValidationError("Administrators cannot delete their own account.")

        try:
            blog_ids = select(Blog.id).where(Blog.author_id == user_id).scalar_subquery()
            await db.execute(delete(Comment).where(Comment.blog_id.in_(blog_ids)))
            await db.execute(delete(BlogLike).where(BlogLike.blog_id.in_(blog_ids)))
            await db.execute(delete(Comment).where(Comment.author_id == user_id))
            await db.execute(delete(BlogLike).where(BlogLike.user_id == user_id))
            await db.execute(delete(Blog).where(Blog.author_id == user_id))
            await db.execute(delete(CategoryRequest).where(CategoryRequest.requested_by_id == user_id))
            await db.delete(user)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"User {user_id} deleted by admin {current_user.id}")


# Singleton instance
user_service = UserService()
