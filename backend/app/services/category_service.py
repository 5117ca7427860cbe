"""Service for managing blog categories"""
import logging
from typing import List, Optional
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from app.errors import ValidationError, ConflictError, NotFoundError
from app.models.blog import Blog
from app.models.category import Category, CategoryCreate, CategoryUpdate, CategoryResponse
from app.services.cache import cache_service
from app.utils import slugify

logger = logging.getLogger(__name__)

LIST_CACHE_KEY = "categories:all"
# Bumped on every change; a list read that raced an invalidation lands under a stale version
LIST_VERSION_KEY = "categories:version"


class CategoryService:
    """Service for category CRUD operations"""

    async def get_all_categories(self, db: AsyncSession) -> List[CategoryResponse]:
        """All categories ordered by name"""
        cache_key = await self._list_key()
        cached_result = await cache_service.get(cache_key)
        if cached_result is not None:
            logger.debug("Cache hit for categories list")
            return [CategoryResponse(**cat) for cat in cached_result]

        result = await db.execute(select(Category).order_by(Category.name))
        categories = [CategoryResponse.model_validate(c) for c in result.scalars().all()]

        # TTL: 10 minutes for category lists
        await cache_service.set(cache_key, [c.model_dump() for c in categories], ttl=600)
        return categories

    async def get_category(self, db: AsyncSession, category_id: int) -> Category:
        result = await db.execute(select(Category).where(Category.id == category_id))
        category = result.scalar_one_or_none()
        if not category:
            raise NotFoundError("Category not found.")
        return category

    async def find_existing(self, db: AsyncSession, name: str, slug: str) -> Optional[Category]:
        """Category whose name (case-insensitive) or slug collides with the given pair"""
        result = await db.execute(
            select(Category).where(
                or_(func.lower(Category.name) == name.lower(), Category.slug == slug)
            )
        )
        return result.scalars().first()

    async def create_category(self, db: AsyncSession, category_data: CategoryCreate) -> Category:
        name = category_data.name.strip()
        if not name:
            raise ValidationError("Category name is required.")

        slug = slugify(category_data.slug or name)
        if not slug:
            raise ValidationError("Category slug could not be derived from the name.")

        category = Category(name=name, slug=slug)
        db.add(category)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.info(f"Duplicate category {name!r}/{slug!r}: {e.orig}")
            raise ConflictError(f"Category with name '{name}' or slug '{slug}' already exists.")
        except Exception:
            await db.rollback()
            raise

        await db.refresh(category)
        await self.invalidate_cache()
        logger.info(f"Created category {category.id} ({category.slug})")
        return category

    async def get_or_create(self, db: AsyncSession, name: str) -> Category:
        """
        Idempotent on the unique name/slug constraints.

        Runs inside the caller's transaction and does not commit. The insert
        goes through a savepoint so that losing a race to a concurrent writer
        only rolls back the insert; the existing row is linked instead.
        """
        name = name.strip()
        slug = slugify(name)

        existing = await self.find_existing(db, name, slug)
        if existing:
            return existing

        try:
            async with db.begin_nested():
                category = Category(name=name, slug=slug)
                db.add(category)
        except IntegrityError:
            logger.info(f"Category {slug!r} was created concurrently, linking it")
            existing = await self.find_existing(db, name, slug)
            if existing is None:
                raise
            return existing

        return category

    async def update_category(self, db: AsyncSession, category_id: int, category_data: CategoryUpdate) -> Category:
        category = await self.get_category(db, category_id)

        changes = category_data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes:
            name = changes["name"].strip()
            if not name:
                raise ValidationError("Category name is required.")
            category.name = name
        if "slug" in changes:
            slug = slugify(changes["slug"])
            if not slug:
                raise ValidationError("Category slug is invalid.")
            category.slug = slug

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Another category already uses this name or slug.")
        except Exception:
            await db.rollback()
            raise

        await db.refresh(category)
        await self.invalidate_cache()
        return category

    async def delete_category(self, db: AsyncSession, category_id: int) -> None:
        category = await self.get_category(db, category_id)

        in_use = await db.scalar(
            select(func.count()).select_from(Blog).where(Blog.category_id == category_id)
        )
        if in_use:
            raise ConflictError(f"Category is used by {in_use} blog(s) and cannot be deleted.")

        try:
            await db.delete(category)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await self.invalidate_cache()
        logger.info(f"Deleted category {category_id}")

    async def _list_key(self) -> str:
        version = await cache_service.get(LIST_VERSION_KEY) or 0
        return f"{LIST_CACHE_KEY}:{version}"

    async def invalidate_cache(self):
        await cache_service.incr(LIST_VERSION_KEY)
        await cache_service.delete_pattern(f"{LIST_CACHE_KEY}:*")


# Singleton instance
category_service = CategoryService()
