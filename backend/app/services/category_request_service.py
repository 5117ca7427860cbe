"""
Category-request moderation.

Authors propose a category name; administrators approve it (which creates the
category, or links the one that already exists) or reject it. Transitions are
single conditional UPDATEs guarded by ``status = 'pending'`` so that two
admins acting on the same request at once cannot both win.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import ValidationError, ConflictError, NotFoundError
from app.models.category_request import CategoryRequest, RequestStatus
from app.models.user import User
from app.services.category_service import category_service
from app.utils import slugify

logger = logging.getLogger(__name__)


class CategoryRequestService:

    def __init__(self, min_length: int = None):
        self.min_length = min_length or settings.category_request_min_length

    async def get_request(self, db: AsyncSession, request_id: int) -> CategoryRequest:
        result = await db.execute(
            select(CategoryRequest)
            .where(CategoryRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        request = result.scalar_one_or_none()
        if not request:
            raise NotFoundError("Category request not found.")
        return request

    async def list_requests(
        self, db: AsyncSession, status: Optional[RequestStatus] = None
    ) -> List[CategoryRequest]:
        query = select(CategoryRequest).order_by(CategoryRequest.created_at.desc(), CategoryRequest.id.desc())
        if status is not None:
            query = query.where(CategoryRequest.status == status)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_for_user(self, db: AsyncSession, user: User) -> List[CategoryRequest]:
        result = await db.execute(
            select(CategoryRequest)
            .where(CategoryRequest.requested_by_id == user.id)
            .order_by(CategoryRequest.created_at.desc(), CategoryRequest.id.desc())
        )
        return list(result.scalars().all())

    async def submit(self, db: AsyncSession, name: str, user: User, commit: bool = True) -> CategoryRequest:
        """
        File a pending request for a new category.

        With commit=False the request is only flushed, so the caller can write
        it in the same transaction as other rows and roll both back together.
        """
        name = (name or "").strip()
        if len(name) < self.min_length:
            raise ValidationError(f"Category name must be at least {self.min_length} characters.")

        slug = slugify(name)
        if not slug:
            raise ValidationError("Category name must contain letters or digits.")

        if await category_service.find_existing(db, name, slug):
            raise ConflictError(f"Category '{name}' already exists.")

        pending = await db.scalar(
            select(func.count()).select_from(CategoryRequest).where(
                CategoryRequest.requested_slug == slug,
                CategoryRequest.status == RequestStatus.PENDING,
            )
        )
        if pending:
            raise ConflictError(f"A request for '{name}' is already pending.")

        request = CategoryRequest(
            requested_name=name,
            requested_slug=slug,
            requested_by_id=user.id,
            status=RequestStatus.PENDING,
        )
        db.add(request)
        try:
            if commit:
                await db.commit()
            else:
                await db.flush()
        except IntegrityError:
            # The partial unique index caught a concurrent submission
            await db.rollback()
            raise ConflictError(f"A request for '{name}' is already pending.")

        logger.info(f"User {user.id} requested category {slug!r} (request {request.id})")
        if not commit:
            return request
        return await self.get_request(db, request.id)

    async def _transition(
        self, db: AsyncSession, request_id: int, new_status: RequestStatus, admin: User, **values
    ):
        """pending -> new_status, or NotFoundError if the request is gone or already decided"""
        result = await db.execute(
            update(CategoryRequest)
            .where(
                CategoryRequest.id == request_id,
                CategoryRequest.status == RequestStatus.PENDING,
            )
            .values(
                status=new_status,
                reviewed_by_id=admin.id,
                reviewed_at=datetime.now(timezone.utc),
                **values,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            raise NotFoundError("Pending category request not found.")

    async def approve(self, db: AsyncSession, request_id: int, admin: User) -> CategoryRequest:
        try:
            await self._transition(db, request_id, RequestStatus.APPROVED, admin)

            name = await db.scalar(
                select(CategoryRequest.requested_name).where(CategoryRequest.id == request_id)
            )
            category = await category_service.get_or_create(db, name)
            await db.flush()

            await db.execute(
                update(CategoryRequest)
                .where(CategoryRequest.id == request_id)
                .values(category_id=category.id)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except NotFoundError:
            raise
        except Exception:
            await db.rollback()
            raise

        await category_service.invalidate_cache()
        logger.info(f"Admin {admin.id} approved category request {request_id} -> category {category.id}")
        return await self.get_request(db, request_id)

    async def reject(
        self, db: AsyncSession, request_id: int, admin: User, reason: Optional[str] = None
    ) -> CategoryRequest:
        reason = reason.strip() if reason else None
        await self._transition(
            db, request_id, RequestStatus.REJECTED, admin, rejection_reason=reason or None
        )
        await db.commit()

        logger.info(f"Admin {admin.id} rejected category request {request_id}")
        return await self.get_request(db, request_id)


# Singleton instance
category_request_service = CategoryRequestService()
