from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
import bcrypt
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func
import logging

from app.config import settings
from app.errors import AuthenticationError, ConflictError, PermissionDeniedError
from app.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    """Password hashing, JWT issuing/decoding and credential checks"""

    def __init__(self):
        self.secret_key = settings.secret_key
        self.algorithm = settings.algorithm
        self.access_token_expire = timedelta(minutes=settings.access_token_expire_minutes)
        self.refresh_token_expire = timedelta(days=settings.refresh_token_expire_days)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )

    def get_password_hash(self, password: str) -> str:
        return bcrypt.hashpw(
            password.encode('utf-8'),
            bcrypt.gensalt(rounds=12)
        ).decode('utf-8')

    def _create_token(self, user_id: int, token_type: str, expires: timedelta) -> str:
        # python-jose rejects a non-string sub
        to_encode = {
            "sub": str(user_id),
            "type": token_type,
            "exp": datetime.now(timezone.utc) + expires,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def create_access_token(self, user_id: int) -> str:
        return self._create_token(user_id, "access", self.access_token_expire)

    def create_refresh_token(self, user_id: int) -> str:
        return self._create_token(user_id, "refresh", self.refresh_token_expire)

    def decode_token(self, token: str, expected_type: str = "access") -> Optional[int]:
        """Return the user id carried by a valid token of the expected type"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug(f"JWT decode error: {e}")
            return None

        if payload.get("type") != expected_type:
            return None

        try:
            return int(payload.get("sub"))
        except (TypeError, ValueError):
            return None

    async def get_user_from_token(
        self, db: AsyncSession, token: str, expected_type: str = "access"
    ) -> Optional[User]:
        user_id = self.decode_token(token, expected_type)
        if user_id is None:
            return None

        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def authenticate_user(self, db: AsyncSession, email: str, password: str) -> User:
        """Check credentials, raising with a deliberately generic message"""
        result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
        user = result.scalar_one_or_none()

        if not user or not self.verify_password(password, user.hashed_password):
            logger.info(f"Failed login attempt for {email}")
            raise AuthenticationError("Invalid login credentials.")

        if not user.is_active:
            logger.info(f"Inactive account login attempt: {user.email}")
            raise PermissionDeniedError("Account is inactive. Please contact support.")

        return user

    async def create_user(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        is_admin: bool = False,
    ) -> User:
        email = email.lower()
        existing = await db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("User already registered.")

        user = User(
            name=name.strip(),
            email=email,
            hashed_password=self.get_password_hash(password),
            is_admin=is_admin,
            is_active=True,
        )

        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            await db.rollback()
            raise ConflictError("User already registered.")
        await db.refresh(user)

        logger.info(f"Registered user {user.id} ({user.email})")
        return user

    async def ensure_admin(
        self, db: AsyncSession, name: str, email: str, password: Optional[str] = None
    ) -> User:
        """Promote an existing account to administrator, or create one"""
        result = await db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()

        if user is None:
            if not password:
                raise ValueError("A password is required to create a new administrator")
            return await self.create_user(db, name=name, email=email, password=password, is_admin=True)

        user.is_admin = True
        user.is_active = True
        if password:
            user.hashed_password = self.get_password_hash(password)
        await db.commit()
        await db.refresh(user)
        logger.info(f"Promoted user {user.id} ({user.email}) to administrator")
        return user


# Singleton instance
auth_service = AuthService()
