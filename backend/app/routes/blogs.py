"""API routes for blogs"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.database import get_db
from app.models.blog import BlogCreate, BlogUpdate, BlogResponse, BlogEnvelope, BlogListEnvelope
from app.models.user import User
from app.routes.auth import get_current_user
from app.services.blog_service import blog_service

router = APIRouter(prefix="/api/blog", tags=["blogs"])
logger = logging.getLogger(__name__)


def _list(blogs) -> BlogListEnvelope:
    return BlogListEnvelope(blog=[BlogResponse.model_validate(b) for b in blogs])


@router.post("/add", response_model=BlogEnvelope, status_code=201)
async def add_blog(
    data: BlogCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Publish a blog. Requires authentication.

    - **category_id**: Existing category
    - **slug**: Derived from the title when omitted
    - **requested_category**: Optionally propose a new category at the same time
    """
    blog = await blog_service.create_blog(db, data, current_user)
    return BlogEnvelope(message="Blog added successfully.", blog=BlogResponse.model_validate(blog))


@router.get("/get-all", response_model=BlogListEnvelope)
async def get_dashboard_blogs(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Blogs for the dashboard: every blog for admins, own blogs for authors"""
    author = None if current_user.is_admin else current_user
    return _list(await blog_service.list_blogs(db, author=author))


@router.get("/blogs", response_model=BlogListEnvelope)
async def get_public_blogs(db: AsyncSession = Depends(get_db)):
    """All blogs, newest first"""
    return _list(await blog_service.list_blogs(db))


@router.get("/search", response_model=BlogListEnvelope)
async def search_blogs(
    q: str = Query("", max_length=200),
    db: AsyncSession = Depends(get_db)
):
    """Blogs whose title contains q (case-insensitive)"""
    return _list(await blog_service.search(db, q))


@router.get("/get-blog/{slug}", response_model=BlogEnvelope)
async def get_blog_by_slug(slug: str, db: AsyncSession = Depends(get_db)):
    blog = await blog_service.get_blog_by_slug(db, slug)
    return BlogEnvelope(blog=BlogResponse.model_validate(blog))


@router.get("/get-blog-by-category/{category_slug}", response_model=BlogListEnvelope)
async def get_blogs_by_category(category_slug: str, db: AsyncSession = Depends(get_db)):
    return _list(await blog_service.list_by_category(db, category_slug))


@router.get("/get-related-blog/{blog_id}", response_model=BlogListEnvelope)
async def get_related_blogs(blog_id: int, db: AsyncSession = Depends(get_db)):
    """Other blogs in the same category"""
    return _list(await blog_service.related(db, blog_id))


@router.get("/{blog_id}", response_model=BlogEnvelope)
async def get_blog(blog_id: int, db: AsyncSession = Depends(get_db)):
    blog = await blog_service.get_blog(db, blog_id)
    return BlogEnvelope(blog=BlogResponse.model_validate(blog))


@router.put("/{blog_id}", response_model=BlogEnvelope)
async def update_blog(
    blog_id: int,
    data: BlogUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update a blog. Only its author or an administrator may do this"""
    blog = await blog_service.update_blog(db, blog_id, data, current_user)
    return BlogEnvelope(message="Blog updated successfully.", blog=BlogResponse.model_validate(blog))


@router.delete("/{blog_id}")
async def delete_blog(
    blog_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a blog together with its comments and likes"""
    await blog_service.delete_blog(db, blog_id, current_user)
    return {"success": True, "message": "Blog deleted successfully."}
