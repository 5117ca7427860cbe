from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel
from typing import Optional
import logging

from app.config import settings
from app.database import get_db
from app.errors import AuthenticationError, PermissionDeniedError
from app.models.user import User, UserCreate, UserLogin, UserResponse, UserEnvelope
from app.services.auth import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])

bearer_scheme = HTTPBearer(auto_error=False)


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def _token_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header first, then the HttpOnly cookie set at login"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.cookie_name)


# Dependencies
async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Current user, or None for anonymous visitors"""
    token = _token_from_request(request, credentials)
    if not token:
        return None
    user = await auth_service.get_user_from_token(db, token)
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user"""
    token = _token_from_request(request, credentials)
    if not token:
        raise AuthenticationError("Unauthorized.")

    user = await auth_service.get_user_from_token(db, token)
    if user is None:
        raise AuthenticationError("Could not validate credentials.")
    if not user.is_active:
        raise PermissionDeniedError("Inactive user.")
    return user


async def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """Get current user and verify admin privileges"""
    if not current_user.is_admin:
        raise PermissionDeniedError("Not enough privileges.")
    return current_user


def _issue_tokens(response: Response, user: User, message: str) -> TokenEnvelope:
    access_token = auth_service.create_access_token(user.id)
    refresh_token = auth_service.create_refresh_token(user.id)
    response.set_cookie(
        key=settings.cookie_name,
        value=access_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="none" if settings.cookie_secure else "lax",
        max_age=settings.access_token_expire_minutes * 60,
        path="/",
    )
    return TokenEnvelope(
        message=message,
        user=UserResponse.model_validate(user),
        access_token=access_token,
        refresh_token=refresh_token,
    )


# Routes
@router.post("/register", response_model=UserEnvelope, status_code=201)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user"""
    user = await auth_service.create_user(
        db,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
    )
    return UserEnvelope(message="Registration successful.", user=UserResponse.model_validate(user))


@router.post("/login", response_model=TokenEnvelope)
async def login(credentials: UserLogin, response: Response, db: AsyncSession = Depends(get_db)):
    """Login with email and password; the access token is also set as a cookie"""
    user = await auth_service.authenticate_user(db, credentials.email, credentials.password)
    logger.info(f"Successful login for user: {user.email}")
    return _issue_tokens(response, user, "Login successful.")


@router.post("/refresh", response_model=TokenEnvelope)
async def refresh_token(data: RefreshRequest, response: Response, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a new token pair"""
    user = await auth_service.get_user_from_token(db, data.refresh_token, expected_type="refresh")
    if user is None or not user.is_active:
        raise AuthenticationError("Invalid refresh token.")
    return _issue_tokens(response, user, "Token refreshed.")


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.cookie_name, path="/")
    return {"success": True, "message": "Logout successful."}


@router.get("/me", response_model=UserEnvelope)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return UserEnvelope(user=UserResponse.model_validate(current_user))
