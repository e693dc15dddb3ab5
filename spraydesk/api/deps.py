"""API Dependencies"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from spraydesk.database import get_db
from spraydesk.core.security import decode_token, ACCESS_TOKEN_TYPE
from spraydesk.services.user_service import UserService
from spraydesk.models.user import User

# Security scheme for bearer token
security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def resolve_session(db: AsyncSession, token: str) -> User:
    """
    Turn a bearer token into the signed-in user.

    Used by the HTTP dependency below and by the realtime websocket, which
    carries its token as a query parameter.

    Raises:
        HTTPException: If the token is invalid, revoked, or the user is gone
    """
    payload = decode_token(token)
    if not payload:
        raise _unauthorized("Could not validate credentials")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    user_id_str: Optional[str] = payload.get("sub")
    if not user_id_str:
        raise _unauthorized("Could not validate credentials")

    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise _unauthorized("Invalid user ID")

    user = await UserService.get_user_by_id(db, user_id)
    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )

    # Tokens issued before the last sign-out carry an older version
    if payload.get("ver") != user.session_version:
        raise _unauthorized("Session has ended, please sign in again")

    return user


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        db: Database session
        credentials: HTTP authorization credentials

    Returns:
        Current user
    """
    return await resolve_session(db, credentials.credentials)
