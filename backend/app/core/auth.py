from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.config import settings
from app.core.errors import AuthenticationError, AuthorizationError
from app.models.user import User
from app.repositories.users import UserRepository
from typing import Optional, Tuple
from datetime import datetime, timedelta, timezone
import logging
import uuid

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# JWT settings
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60  # 1 hour
REFRESH_TOKEN_EXPIRE_DAYS = 7  # 7 days for refresh tokens

# Salted password hashes
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(data: dict, expire: datetime, token_type: str) -> str:
    to_encode = data.copy()
    # Ensure sub is a string (RFC 7519)
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])

    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.now(timezone.utc),
            "jti": str(uuid.uuid4()),  # JWT ID for tracking
            "type": token_type,
        }
    )
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Token payload data
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return _encode(data, expire, "access")


def create_refresh_token(data: dict) -> str:
    """Create a JWT refresh token with longer expiration."""
    expire = datetime.now(timezone.utc) + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(data, expire, "refresh")


def create_token_pair(user_id: str) -> Tuple[str, str]:
    """Create both access and refresh tokens for a user."""
    access_token = create_access_token(data={"sub": user_id})
    refresh_token = create_refresh_token(data={"sub": user_id})
    return access_token, refresh_token


def decode_token(token: str, token_type: str = "access") -> dict:
    """
    Decode and validate JWT token.

    Args:
        token: JWT token to decode
        token_type: Expected token type ('access' or 'refresh')

    Returns:
        Decoded token payload

    Raises:
        AuthenticationError: If token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("Token expired")
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise AuthenticationError("Could not validate credentials")

    if payload.get("type") != token_type:
        logger.warning(
            f"Token type mismatch: expected {token_type}, got {payload.get('type')}"
        )
        raise AuthenticationError("Invalid token type")

    return payload


def _token_from_request(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    token = request.cookies.get("auth_token")
    if not token and credentials:
        token = credentials.credentials
    return token


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user from JWT token (cookie or Authorization header)."""
    token = _token_from_request(request, credentials)
    if not token:
        raise AuthenticationError("You must be logged in to perform this action")

    payload = decode_token(token)

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Could not validate credentials")

    user = UserRepository(db).get(str(user_id))
    if user is None:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthorizationError("Inactive user")

    return user


async def get_current_user_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Get the current user if authenticated, otherwise return None."""
    if not _token_from_request(request, credentials):
        return None

    try:
        return await get_current_user(request, credentials, db)
    except (AuthenticationError, AuthorizationError):
        return None
