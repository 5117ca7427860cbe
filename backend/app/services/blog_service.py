"""Service for blog posts"""
import logging
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import ValidationError, ConflictError, NotFoundError, PermissionDeniedError
from app.models.blog import Blog, BlogCreate, BlogUpdate, Comment, BlogLike
from app.models.category import Category
from app.models.user import User
from app.services.category_request_service import category_request_service
from app.utils import slugify

logger = logging.getLogger(__name__)


def ensure_can_modify(blog: Blog, user: User):
    if not user.is_admin and blog.author_id != user.id:
        raise PermissionDeniedError("You can only modify your own blogs.")


class BlogService:

    def _query(self):
        return (
            select(Blog)
            .order_by(Blog.created_at.desc(), Blog.id.desc())
            .execution_options(populate_existing=True)
        )

    async def get_blog(self, db: AsyncSession, blog_id: int) -> Blog:
        result = await db.execute(select(Blog).where(Blog.id == blog_id).execution_options(populate_existing=True))
        blog = result.scalar_one_or_none()
        if not blog:
            raise NotFoundError("Blog not found.")
        return blog

    async def get_blog_by_slug(self, db: AsyncSession, slug: str) -> Blog:
        result = await db.execute(select(Blog).where(Blog.slug == slug))
        blog = result.scalar_one_or_none()
        if not blog:
            raise NotFoundError("Blog not found.")
        return blog

    async def list_blogs(self, db: AsyncSession, author: Optional[User] = None) -> List[Blog]:
        """All blogs, or only the ones written by author"""
        query = self._query()
        if author is not None:
            query = query.where(Blog.author_id == author.id)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_by_category(self, db: AsyncSession, category_slug: str) -> List[Blog]:
        category = await db.scalar(select(Category).where(Category.slug == category_slug))
        if not category:
            raise NotFoundError("Category not found.")
        result = await db.execute(self._query().where(Blog.category_id == category.id))
        return list(result.scalars().all())

    async def related(self, db: AsyncSession, blog_id: int, limit: int = None) -> List[Blog]:
        """Other blogs in the same category"""
        blog = await self.get_blog(db, blog_id)
        result = await db.execute(
            self._query()
            .where(Blog.category_id == blog.category_id, Blog.id != blog.id)
            .limit(limit or settings.related_blogs_limit)
        )
        return list(result.scalars().all())

    async def search(self, db: AsyncSession, q: str) -> List[Blog]:
        q = (q or "").strip()
        if not q:
            return []
        result = await db.execute(self._query().where(Blog.title.ilike(f"%{q}%")))
        return list(result.scalars().all())

    async def _check_category(self, db: AsyncSession, category_id: int):
        exists = await db.scalar(select(Category.id).where(Category.id == category_id))
        if exists is None:
            raise ValidationError(f"Category {category_id} does not exist.")

    async def create_blog(self, db: AsyncSession, data: BlogCreate, author: User) -> Blog:
        await self._check_category(db, data.category_id)

        slug = slugify(data.slug or data.title)
        if not slug:
            raise ValidationError("Blog slug could not be derived from the title.")
        if await db.scalar(select(Blog.id).where(Blog.slug == slug)) is not None:
            raise ConflictError(f"A blog with slug '{slug}' already exists.")

        # The request and the blog are committed together below
        if data.requested_category:
            await category_request_service.submit(db, data.requested_category, author, commit=False)

        blog = Blog(
            author_id=author.id,
            category_id=data.category_id,
            title=data.title.strip(),
            slug=slug,
            blog_content=data.blog_content,
            featured_image=data.featured_image,
        )
        db.add(blog)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"A blog with slug '{slug}' already exists.")

        logger.info(f"User {author.id} published blog {blog.id} ({slug})")
        return await self.get_blog(db, blog.id)

    async def update_blog(self, db: AsyncSession, blog_id: int, data: BlogUpdate, user: User) -> Blog:
        blog = await self.get_blog(db, blog_id)
        ensure_can_modify(blog, user)

        changes = data.model_dump(exclude_unset=True)
        for required in ("category_id", "title", "slug", "blog_content"):
            if required in changes and changes[required] is None:
                raise ValidationError(f"{required} cannot be empty.")

        if "category_id" in changes:
            await self._check_category(db, changes["category_id"])
        if "slug" in changes:
            changes["slug"] = slugify(changes["slug"])
            if not changes["slug"]:
                raise ValidationError("Blog slug is invalid.")

        for field, value in changes.items():
            setattr(blog, field, value)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Another blog already uses this slug.")

        return await self.get_blog(db, blog_id)

    async def delete_blog(self, db: AsyncSession, blog_id: int, user: User) -> None:
        blog = await self.get_blog(db, blog_id)
        ensure_can_modify(blog, user)

        try:
            await db.execute(delete(Comment).where(Comment.blog_id == blog_id))
            await db.execute(delete(BlogLike).where(BlogLike.blog_id == blog_id))
            await db.delete(blog)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"User {user.id} deleted blog {blog_id}")


# Singleton instance
blog_service = BlogService()
