"""API routes for the category request moderation workflow"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from app.database import get_db
from app.models.category_request import (
    RequestStatus,
    CategoryRequestCreate,
    CategoryRequestReject,
    CategoryRequestResponse,
    CategoryRequestEnvelope,
    CategoryRequestListEnvelope,
)
from app.models.user import User
from app.routes.auth import get_current_user, get_current_admin_user
from app.services.category_request_service import category_request_service

router = APIRouter(prefix="/api/category-requests", tags=["category-requests"])
logger = logging.getLogger(__name__)


def _envelope(request, message: str = None) -> CategoryRequestEnvelope:
    return CategoryRequestEnvelope(message=message, request=CategoryRequestResponse.model_validate(request))


@router.post("/request", response_model=CategoryRequestEnvelope, status_code=201)
async def request_category(
    data: CategoryRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Propose a new category; an administrator approves or rejects it later"""
    request = await category_request_service.submit(db, data.name, current_user)
    return _envelope(request, "Category request submitted.")


@router.get("/", response_model=CategoryRequestListEnvelope)
async def list_requests(
    status: Optional[RequestStatus] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """
    List category requests, newest first. Requires admin authentication.

    - **status**: Only requests in this state (pending, approved, rejected)
    """
    requests = await category_request_service.list_requests(db, status)
    return CategoryRequestListEnvelope(
        requests=[CategoryRequestResponse.model_validate(r) for r in requests]
    )


@router.get("/mine", response_model=CategoryRequestListEnvelope)
async def list_my_requests(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    requests = await category_request_service.list_for_user(db, current_user)
    return CategoryRequestListEnvelope(
        requests=[CategoryRequestResponse.model_validate(r) for r in requests]
    )


@router.put("/{request_id}/approve", response_model=CategoryRequestEnvelope)
async def approve_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Approve a pending request, creating the category (or linking an existing one)"""
    request = await category_request_service.approve(db, request_id, current_user)
    return _envelope(request, "Category request approved.")


@router.put("/{request_id}/reject", response_model=CategoryRequestEnvelope)
async def reject_request(
    request_id: int,
    data: Optional[CategoryRequestReject] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin_user)
):
    """Reject a pending request, optionally with a reason"""
    reason = data.reason if data else None
    request = await category_request_service.reject(db, request_id, current_user, reason)
    return _envelope(request, "Category request rejected.")
