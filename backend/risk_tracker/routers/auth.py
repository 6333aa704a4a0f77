"""
Authentication routes for user registration, login and password reset.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from risk_tracker.config import get_settings
from risk_tracker.database import get_db
from risk_tracker.models.user import (
    UserCreate, UserResponse, Token, User,
    ForgotPasswordRequest, ForgotPasswordResponse, ResetPasswordRequest
)
from risk_tracker.services.auth_service import AuthService, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])
settings = get_settings()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new user.
    """
    logger.info(f"Registering new user: {user_data.email}")
    user = AuthService.create_user(db, user_data)
    logger.info(f"User created successfully: {user.id}")
    return UserResponse(
        id=str(user.id),
        email=user.email,
        name=user.name,
        role=user.role,
        created_at=user.created_at
    )


@router.post("/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """
    Authenticate user and return JWT token.
    """
    user = AuthService.authenticate_user(db, form_data.username, form_data.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Token(access_token=AuthService.token_for(user), token_type="bearer")


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user information."""
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        name=current_user.name,
        role=current_user.role,
        created_at=None
    )


@router.post("/refresh", response_model=Token)
def refresh_token(current_user: User = Depends(get_current_user)):
    """Refresh JWT token for authenticated user."""
    access_token = AuthService.create_access_token(
        data={"sub": current_user.id, "email": current_user.email, "role": current_user.role}
    )
    return Token(access_token=access_token, token_type="bearer")


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
def forgot_password(request: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """Start a password reset. The token is only echoed back in development."""
    token = AuthService.initiate_password_reset(db, request.email)
    return ForgotPasswordResponse(
        message="Password reset initiated",
        reset_token=token if settings.environment == "development" else None
    )


@router.post("/reset-password")
def reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Set a new password using a reset token."""
    AuthService.reset_password(db, request.email, request.token, request.new_password)
    return {"message": "Password updated successfully"}
