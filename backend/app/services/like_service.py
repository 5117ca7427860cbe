"""Service for blog likes"""
import logging
from typing import Optional, Tuple

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError
from app.models.blog import Blog, BlogLike
from app.models.user import User

logger = logging.getLogger(__name__)


class LikeService:

    async def _ensure_blog(self, db: AsyncSession, blog_id: int):
        if await db.scalar(select(Blog.id).where(Blog.id == blog_id)) is None:
            raise NotFoundError("Blog not found.")

    async def count(self, db: AsyncSession, blog_id: int) -> int:
        return await db.scalar(
            select(func.count()).select_from(BlogLike).where(BlogLike.blog_id == blog_id)
        )

    async def has_liked(self, db: AsyncSession, blog_id: int, user: Optional[User]) -> bool:
        if user is None:
            return False
        like_id = await db.scalar(
            select(BlogLike.id).where(BlogLike.blog_id == blog_id, BlogLike.user_id == user.id)
        )
        return like_id is not None

    async def toggle(self, db: AsyncSession, blog_id: int, user: User) -> Tuple[int, bool]:
        """Like the blog, or unlike it if already liked. Returns (like count, liked)"""
        await self._ensure_blog(db, blog_id)

        result = await db.execute(
            delete(BlogLike).where(BlogLike.blog_id == blog_id, BlogLike.user_id == user.id)
        )
        if result.rowcount:
            liked = False
        else:
            db.add(BlogLike(blog_id=blog_id, user_id=user.id))
            liked = True

        try:
            await db.commit()
        except IntegrityError:
            # A concurrent request already inserted this like
            await db.rollback()
            liked = True

        return await self.count(db, blog_id), liked

    async def status(self, db: AsyncSession, blog_id: int, user: Optional[User]) -> Tuple[int, bool]:
        await self._ensure_blog(db, blog_id)
        return await self.count(db, blog_id), await self.has_liked(db, blog_id, user)


# Singleton instance
like_service = LikeService()
