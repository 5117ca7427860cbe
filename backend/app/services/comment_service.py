"""Service for blog comments"""
import logging
from typing import List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError, PermissionDeniedError, ValidationError
from app.models.blog import Blog, Comment, CommentCreate
from app.models.user import User

logger = logging.getLogger(__name__)


class CommentService:

    def _query(self):
        return select(Comment).order_by(Comment.created_at.desc(), Comment.id.desc())

    async def get_comment(self, db: AsyncSession, comment_id: int) -> Comment:
        comment = await db.scalar(
            select(Comment).where(Comment.id == comment_id).execution_options(populate_existing=True)
        )
        if not comment:
            raise NotFoundError("Comment not found.")
        return comment

    async def _ensure_blog(self, db: AsyncSession, blog_id: int):
        if await db.scalar(select(Blog.id).where(Blog.id == blog_id)) is None:
            raise NotFoundError("Blog not found.")

    async def add_comment(self, db: AsyncSession, data: CommentCreate, author: User) -> Comment:
        text = data.comment.strip()
        if not text:
            raise ValidationError("Comment cannot be empty.")
        await self._ensure_blog(db, data.blog_id)

        comment = Comment(blog_id=data.blog_id, author_id=author.id, comment=text)
        db.add(comment)
        await db.commit()

        logger.debug(f"User {author.id} commented on blog {data.blog_id}")
        return await self.get_comment(db, comment.id)

    async def list_for_blog(self, db: AsyncSession, blog_id: int) -> List[Comment]:
        await self._ensure_blog(db, blog_id)
        result = await db.execute(self._query().where(Comment.blog_id == blog_id))
        return list(result.scalars().all())

    async def count_for_blog(self, db: AsyncSession, blog_id: int) -> int:
        await self._ensure_blog(db, blog_id)
        return await db.scalar(
            select(func.count()).select_from(Comment).where(Comment.blog_id == blog_id)
        )

    async def list_all(self, db: AsyncSession, user: User) -> List[Comment]:
        """Admins see every comment; authors see comments left on their own blogs"""
        query = self._query()
        if not user.is_admin:
            query = query.join(Blog, Blog.id == Comment.blog_id).where(Blog.author_id == user.id)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def delete_comment(self, db: AsyncSession, comment_id: int, user: User) -> None:
        comment = await self.get_comment(db, comment_id)

        if not user.is_admin and comment.author_id != user.id:
            blog_author = await db.scalar(select(Blog.author_id).where(Blog.id == comment.blog_id))
            if blog_author != user.id:
                raise PermissionDeniedError("You cannot delete this comment.")

        await db.delete(comment)
        await db.commit()
        logger.debug(f"User {user.id} deleted comment {comment_id}")


# Singleton instance
comment_service = CommentService()
