"""Session gate endpoints: sign up, sign in, session lookup, sign out"""

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from spraydesk.api import deps
from spraydesk.config import settings
from spraydesk.core import security
from spraydesk.core.rate_limit import limiter
from spraydesk.models.user import User
from spraydesk.schemas.auth import LoginRequest, SignupRequest, Token, SessionInfo
from spraydesk.schemas.responses import SuccessResponse
from spraydesk.services.user_service import UserService

router = APIRouter()


def _session_info(user: User) -> SessionInfo:
    return SessionInfo(user_id=user.id, email=user.email, full_name=user.full_name)


@router.post("/signup", response_model=SuccessResponse[SessionInfo])
async def signup(
    signup_in: SignupRequest,
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Create a staff account. The new user still has to sign in."""
    existing = await UserService.get_user_by_email(db, signup_in.email)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A user with this email already exists",
        )
    user = await UserService.create_user(
        db,
        email=signup_in.email,
        password=signup_in.password,
        full_name=signup_in.full_name,
    )
    return SuccessResponse(data=_session_info(user), message="Account created, please sign in")


@router.post("/login", response_model=SuccessResponse[Token])
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Exchange email and password for a bearer token."""
    user = await UserService.authenticate_user(db, email=login_data.email, password=login_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = security.create_access_token(
        user_id=str(user.id),
        session_version=user.session_version,
        expires_delta=expires,
    )
    return SuccessResponse(
        data=Token(
            access_token=access_token,
            token_type="bearer",
            user_id=str(user.id),
            expires_in=int(expires.total_seconds()),
        ),
        message="Login successful",
    )


@router.get("/session", response_model=SuccessResponse[SessionInfo])
async def get_session(current_user: User = Depends(deps.get_current_user)) -> Any:
    """The signed-in user behind the bearer token."""
    return SuccessResponse(data=_session_info(current_user))


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Sign out; every token issued so far stops working."""
    await UserService.end_sessions(db, current_user)
    return SuccessResponse(message="You have been logged out")
