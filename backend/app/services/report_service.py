"""Aggregate numbers for the admin dashboard"""
import logging

from pydantic import BaseModel
from typing import Dict, List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.blog import Blog, Comment, BlogLike
from app.models.category import Category
from app.models.category_request import CategoryRequest, RequestStatus
from app.models.user import User

logger = logging.getLogger(__name__)


class CategoryBlogCount(BaseModel):
    id: int
    name: str
    slug: str
    blog_count: int


class TopBlog(BaseModel):
    id: int
    title: str
    slug: str
    like_count: int


class ReportOverview(BaseModel):
    users: int
    blogs: int
    categories: int
    comments: int
    likes: int
    category_requests: Dict[str, int]
    blogs_per_category: List[CategoryBlogCount]
    top_blogs: List[TopBlog]


class ReportService:

    async def _count(self, db: AsyncSession, model) -> int:
        return await db.scalar(select(func.count()).select_from(model)) or 0

    async def overview(self, db: AsyncSession, top: int = None) -> ReportOverview:
        request_rows = await db.execute(
            select(CategoryRequest.status, func.count()).group_by(CategoryRequest.status)
        )
        requests = {s.value: 0 for s in RequestStatus}
        for status, count in request_rows.all():
            requests[RequestStatus(status).value] = count

        per_category = await db.execute(
            select(Category.id, Category.name, Category.slug, func.count(Blog.id))
            .outerjoin(Blog, Blog.category_id == Category.id)
            .group_by(Category.id, Category.name, Category.slug)
            .order_by(Category.name)
        )

        like_count = func.count(BlogLike.id).label("like_count")
        top_rows = await db.execute(
            select(Blog.id, Blog.title, Blog.slug, like_count)
            .outerjoin(BlogLike, BlogLike.blog_id == Blog.id)
            .group_by(Blog.id, Blog.title, Blog.slug)
            .order_by(like_count.desc(), Blog.id.desc())
            .limit(top or settings.report_top_blogs)
        )

        return ReportOverview(
            users=await self._count(db, User),
            blogs=await self._count(db, Blog),
            categories=await self._count(db, Category),
            comments=await self._count(db, Comment),
            likes=await self._count(db, BlogLike),
            category_requests=requests,
            blogs_per_category=[
                CategoryBlogCount(id=r[0], name=r[1], slug=r[2], blog_count=r[3])
                for r in per_category.all()
            ],
            top_blogs=[
                TopBlog(id=r[0], title=r[1], slug=r[2], like_count=r[3])
                for r in top_rows.all()
            ],
        )


# Singleton instance
report_service = ReportService()
