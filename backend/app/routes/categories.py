"""API routes for category management"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.database import get_db
from app.models.category import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryEnvelope, CategoryListEnvelope,
)
from app.models.user import User
from app.routes.auth import get_current_admin_user
from app.services.category_service import category_service

router = APIRouter(prefix="/api/category", tags=["categories"])
logger = logging.getLogger(__name__)


@router.post("/add", response_model=CategoryEnvelope, status_code=201)
async def add_category(
    category_data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Create a new category. Requires admin authentication.

    - **name**: Category name (unique, required)
    - **slug**: URL slug (unique, derived from the name when omitted)
    """
    category = await category_service.create_category(db, category_data)
    return CategoryEnvelope(
        message="Category added successfully.",
        category=CategoryResponse.model_validate(category),
    )


@router.get("/all-category", response_model=CategoryListEnvelope)
async def get_all_categories(db: AsyncSession = Depends(get_db)):
    """All categories, ordered alphabetically by name"""
    categories = await category_service.get_all_categories(db)
    return CategoryListEnvelope(category=categories)


@router.get("/{category_id}", response_model=CategoryEnvelope)
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)):
    category = await category_service.get_category(db, category_id)
    return CategoryEnvelope(category=CategoryResponse.model_validate(category))


@router.put("/{category_id}", response_model=CategoryEnvelope)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    Update an existing category. Requires admin authentication.

    Only the fields present in the body are changed.
    """
    category = await category_service.update_category(db, category_id, category_data)
    return CategoryEnvelope(
        message="Category updated successfully.",
        category=CategoryResponse.model_validate(category),
    )


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Delete a category. Fails with 404 if it doesn't exist, 409 while blogs still use it"""
    await category_service.delete_category(db, category_id)
    return {"success": True, "message": "Category deleted successfully."}
