import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.database import Base
from app.models.user import UserSummary


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CategoryRequest(Base):
    """
    A category proposed by an author, waiting for an administrator.

    pending -> approved (links or creates a Category) or pending -> rejected.
    Both outcomes are terminal.
    """
    __tablename__ = "category_requests"

    id = Column(Integer, primary_key=True, index=True)
    requested_name = Column(String(255), nullable=False)
    requested_slug = Column(String(255), nullable=False, index=True)
    requested_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum(RequestStatus, name="category_request_status", native_enum=False,
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RequestStatus.PENDING,
        index=True,
    )
    rejection_reason = Column(Text, nullable=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    requested_by = relationship("User", foreign_keys=[requested_by_id], lazy="joined")

    # Only one pending request per slug; decided requests don't count
    __table_args__ = (
        Index(
            "uq_category_requests_pending_slug",
            "requested_slug",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )


# Pydantic models for API

class CategoryRequestCreate(BaseModel):
    name: str = Field(..., max_length=255)


class CategoryRequestReject(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000)


class CategoryRequestResponse(BaseModel):
    id: int
    requested_name: str
    requested_slug: str
    status: RequestStatus
    requested_by: Optional[UserSummary] = None
    rejection_reason: Optional[str] = None
    reviewed_by_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    category_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryRequestEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    request: CategoryRequestResponse


class CategoryRequestListEnvelope(BaseModel):
    success: bool = True
    requests: List[CategoryRequestResponse]
