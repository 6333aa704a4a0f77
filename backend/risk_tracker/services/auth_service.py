"""
Authentication service for user management and JWT handling.
"""
import secrets
import logging
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status, Header
from sqlalchemy.orm import Session

from risk_tracker.config import get_settings
from risk_tracker.database import get_db, User as UserDB
from risk_tracker.models.user import UserCreate, User, TokenData, UserRole

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:
    """Service for authentication and authorization."""

    @staticmethod
    def _truncate_password(password: str) -> str:
        """Truncate password to 72 bytes (bcrypt limit)."""
        return password.encode('utf-8')[:72].decode('utf-8', errors='ignore')

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a hash."""
        truncated = AuthService._truncate_password(plain_password)
        return pwd_context.verify(truncated, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hash a password."""
        truncated = AuthService._truncate_password(password)
        return pwd_context.hash(truncated)

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT access token."""
        to_encode = data.copy()
        expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    @staticmethod
    def token_for(user: UserDB) -> str:
        return AuthService.create_access_token(
            data={"sub": str(user.id), "email": user.email, "role": user.role}
        )

    @staticmethod
    def decode_token(token: str) -> Optional[TokenData]:
        """Verify a JWT and return its identity, or None if it is invalid."""
        try:
            payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        except JWTError as e:
            logger.warning(f"JWT decode error: {e}")
            return None
        user_id = payload.get("sub")
        if not user_id:
            logger.warning("No 'sub' (user_id) claim in token")
            return None
        return TokenData(user_id=user_id, email=payload.get("email"), role=payload.get("role"))

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[UserDB]:
        """Get a user by email from database."""
        return db.query(UserDB).filter(UserDB.email == email).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: str) -> Optional[UserDB]:
        """Get a user by ID from database."""
        return db.query(UserDB).filter(UserDB.id == user_id).first()

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> Optional[UserDB]:
        """Authenticate a user with email and password."""
        user = AuthService.get_user_by_email(db, email)
        if not user or not AuthService.verify_password(password, user.hashed_password):
            return None
        return user

    @staticmethod
    def create_user(db: Session, user_data: UserCreate, role: UserRole = UserRole.USER) -> UserDB:
        """Create a new user in database.

        Self-registration always creates plain users; elevated roles are
        granted afterwards from the admin dashboard.
        """
        existing = AuthService.get_user_by_email(db, user_data.email)
        if existing:
            raise HTTPException(status_code=409, detail="User already exists")

        db_user = UserDB(
            email=user_data.email,
            hashed_password=AuthService.get_password_hash(user_data.password),
            name=user_data.name,
            role=role.value,
        )

        db.add(db_user)
        db.commit()
        db.refresh(db_user)

        return db_user

    @staticmethod
    def initiate_password_reset(db: Session, email: str) -> str:
        """Store a hashed one-hour reset token for the user and return the plain token."""
        user = AuthService.get_user_by_email(db, email)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        token = secrets.token_hex(32)
        user.reset_token = pwd_context.hash(token)
        user.reset_token_expiry = datetime.utcnow() + timedelta(minutes=settings.reset_token_expire_minutes)
        db.commit()

        logger.info(f"Password reset initiated for {email}")
        return token

    @staticmethod
    def reset_password(db: Session, email: str, token: str, new_password: str):
        """Replace the password if the reset token matches and has not expired."""
        user = AuthService.get_user_by_email(db, email)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        if not user.reset_token or not user.reset_token_expiry:
            raise HTTPException(status_code=400, detail="Invalid reset token")
        if datetime.utcnow() > user.reset_token_expiry:
            raise HTTPException(status_code=400, detail="Reset token has expired")
        if not pwd_context.verify(token, user.reset_token):
            raise HTTPException(status_code=400, detail="Invalid reset token")

        user.hashed_password = AuthService.get_password_hash(new_password)
        user.reset_token = None
        user.reset_token_expiry = None
        db.commit()
        logger.info(f"Password updated for {email}")


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    # Expect header of the form: "Bearer <token>"
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("Invalid Authorization header format")
        return None
    return parts[1]


def get_optional_identity(authorization: str = Header(None)) -> Optional[TokenData]:
    """Dependency returning the verified token identity, or None.

    No database access happens here; callers that need the user record load it
    themselves.
    """
    token = _bearer_token(authorization)
    if token is None:
        return None
    return AuthService.decode_token(token)


def get_current_user(
    identity: Optional[TokenData] = Depends(get_optional_identity),
    db: Session = Depends(get_db)
) -> User:
    """Dependency to get current authenticated user from JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if identity is None:
        raise credentials_exception

    user = AuthService.get_user_by_id(db, identity.user_id)
    if user is None:
        logger.error(f"User not found: {identity.user_id}")
        raise credentials_exception

    return User(id=str(user.id), email=user.email, name=user.name, role=user.role)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Dependency to ensure user is admin."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user
