"""User Service - session gate business logic"""

from typing import Optional
from uuid import UUID
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from spraydesk.models.user import User
from spraydesk.core.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for staff accounts and sessions"""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        full_name: Optional[str] = None,
    ) -> User:
        """Create a new staff account with a bcrypt-hashed password."""
        user = User(
            email=email.lower(),
            hashed_password=get_password_hash(password),
            full_name=full_name,
            is_active=True,
            session_version=0,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info("User created", extra={"user_id": user.id})
        return user

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def authenticate_user(
        db: AsyncSession,
        email: str,
        password: str
    ) -> Optional[User]:
        """
        Authenticate user with email and password.

        Args:
            db: Database session
            email: User email
            password: Plain text password

        Returns:
            User if authenticated, None otherwise
        """
        user = await UserService.get_user_by_email(db, email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            logger.info("Failed sign-in", extra={"user_id": user.id})
            return None
        if not user.is_active:
            return None
        return user

    @staticmethod
    async def end_sessions(db: AsyncSession, user: User) -> int:
        """
        Sign the user out everywhere by bumping their session version.

        Returns:
            The new session version
        """
        result = await db.execute(
            update(User)
            .where(User.id == user.id)
            .values(session_version=User.session_version + 1)
            .returning(User.session_version)
        )
        new_version = result.scalar_one()
        await db.commit()
        logger.info("User signed out", extra={"user_id": user.id})
        return new_version
