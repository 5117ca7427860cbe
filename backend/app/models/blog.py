from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.database import Base
from app.models.category import CategoryResponse
from app.models.user import UserSummary


class Blog(Base):
    """Blog post written by a user under one category"""
    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    slug = Column(String(500), unique=True, nullable=False, index=True)
    blog_content = Column(Text, nullable=False)  # HTML from the rich-text editor
    featured_image = Column(String(1024), nullable=True)  # Image URL
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    author = relationship("User", lazy="joined")
    category = relationship("Category", lazy="joined")


class Comment(Base):
    """Comment on a blog"""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    blog_id = Column(Integer, ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    author = relationship("User", lazy="joined")


class BlogLike(Base):
    """A user's like on a blog"""
    __tablename__ = "blog_likes"

    id = Column(Integer, primary_key=True, index=True)
    blog_id = Column(Integer, ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Each user can only like a blog once
    __table_args__ = (UniqueConstraint("blog_id", "user_id", name="uq_blog_user_like"),)


# Pydantic models for API

class BlogCreate(BaseModel):
    category_id: int
    title: str = Field(..., min_length=3, max_length=500)
    slug: Optional[str] = Field(None, max_length=500, description="Derived from title when omitted")
    blog_content: str = Field(..., min_length=3)
    featured_image: Optional[str] = None
    requested_category: Optional[str] = Field(
        None, max_length=255, description="Also submit a request for a new category"
    )


class BlogUpdate(BaseModel):
    category_id: Optional[int] = None
    title: Optional[str] = Field(None, min_length=3, max_length=500)
    slug: Optional[str] = Field(None, min_length=3, max_length=500)
    blog_content: Optional[str] = Field(None, min_length=3)
    featured_image: Optional[str] = None


class BlogResponse(BaseModel):
    id: int
    title: str
    slug: str
    blog_content: str
    featured_image: Optional[str] = None
    author: UserSummary
    category: CategoryResponse
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BlogEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    blog: BlogResponse


class BlogListEnvelope(BaseModel):
    success: bool = True
    blog: List[BlogResponse]


class CommentCreate(BaseModel):
    blog_id: int
    comment: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    id: int
    blog_id: int
    comment: str
    author: UserSummary
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CommentEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    comment: CommentResponse


class CommentListEnvelope(BaseModel):
    success: bool = True
    comments: List[CommentResponse]


class CommentCountEnvelope(BaseModel):
    success: bool = True
    commentCount: int


class LikeToggle(BaseModel):
    blog_id: int


class LikeStatusEnvelope(BaseModel):
    success: bool = True
    likecount: int
    isUserliked: bool = False
