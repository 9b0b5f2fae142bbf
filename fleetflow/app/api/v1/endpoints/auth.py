"""
Authentication API endpoints.

Provides register, login, logout, password reset and user info endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fleetflow.app.core.config import settings
from fleetflow.app.db.persistence import commit_or_raise
from fleetflow.app.db.session import get_db
from fleetflow.app.models.user import User
from fleetflow.app.schemas.auth import (
    UserRegister, UserLogin, TokenResponse, UserResponse,
    PasswordResetRequest, PasswordResetRequestResponse, PasswordResetConfirm,
    PasswordUpdate, MessageResponse
)
from fleetflow.app.core.security import get_password_hash, verify_password
from fleetflow.app.core.jwt import create_access_token, create_reset_token, decode_reset_token
from fleetflow.app.core.dependencies import get_current_user
from fleetflow.app.core.token_revocation import (
    revoke_token, revoke_user_tokens_issued_before_now, is_issued_before_revocation
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

RESET_REQUESTED_MESSAGE = "If an account exists for that email, a password reset link has been sent."


def _issue_token(user: User) -> TokenResponse:
    jwt_payload = {
        "sub": user.email,
        "user_id": user.id,
        "role": user.role.value,
    }

    return TokenResponse(
        access_token=create_access_token(data=jwt_payload),
        token_type="bearer",
        user_id=user.id,
        email=user.email,
        full_name=user.display_name,
        role=user.role
    )


async def _find_user_by_email(db: AsyncSession, email: str):
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new user.

    The account and its profile (name, role) are stored in one row, so both
    are created together.
    """
    if await _find_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    new_user = User(
        email=user_data.email.strip().lower(),
        full_name=user_data.full_name,
        hashed_password=get_password_hash(user_data.password),
        role=user_data.role,
        is_active=True
    )

    db.add(new_user)
    await commit_or_raise(db, "register user")
    await db.refresh(new_user)

    logger.info("Registered user %s as %s", new_user.id, new_user.role.value)
    return _issue_token(new_user)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password and return a JWT token."""
    user = await _find_user_by_email(db, credentials.email)

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        logger.warning("Login attempt on inactive account %s", user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user account"
        )

    return _issue_token(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: dict = Depends(get_current_user)):
    """Revoke the token used for this request."""
    await revoke_token(current_user["token"], current_user["user_id"])
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get current authenticated user information.

    Raises:
        404: If user not found in database
    """
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return UserResponse.model_validate(user)


@router.post("/password-reset/request", response_model=PasswordResetRequestResponse)
async def request_password_reset(
    reset_data: PasswordResetRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Start a password reset.

    The response is the same whether or not the email is registered. The
    reset token is only included when running in debug mode; otherwise it
    is meant to travel by email.
    """
    user = await _find_user_by_email(db, reset_data.email)
    if not user or not user.is_active:
        return PasswordResetRequestResponse(message=RESET_REQUESTED_MESSAGE)

    token = create_reset_token(user.id, user.email)
    logger.info("Password reset requested for user %s", user.id)

    return PasswordResetRequestResponse(
        message=RESET_REQUESTED_MESSAGE,
        reset_token=token if settings.debug else None
    )


@router.post("/password-reset/confirm", response_model=MessageResponse)
async def confirm_password_reset(
    reset_data: PasswordResetConfirm,
    db: AsyncSession = Depends(get_db)
):
    """Set a new password with a reset token. Signs the user out everywhere."""
    payload = decode_reset_token(reset_data.token)
    if payload is None or not payload.get("user_id"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token"
        )

    # A reset revokes everything issued before it, including its own token
    if await is_issued_before_revocation(payload["user_id"], payload.get("iat")):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Reset token has already been used"
        )

    result = await db.execute(select(User).where(User.id == payload["user_id"]))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token"
        )

    user.hashed_password = get_password_hash(reset_data.new_password)
    await commit_or_raise(db, "reset password")
    await revoke_user_tokens_issued_before_now(user.id)

    logger.info("Password reset completed for user %s", user.id)
    return MessageResponse(message="Password updated. Please sign in with your new password.")


@router.post("/password", response_model=MessageResponse)
async def update_password(
    password_data: PasswordUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change the signed-in user's password and end every existing session."""
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    user = result.scalar_one()

    user.hashed_password = get_password_hash(password_data.password)
    await commit_or_raise(db, "update password")
    await revoke_user_tokens_issued_before_now(user.id)

    return MessageResponse(message="Password updated. Please sign in again.")
