from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.config import settings
from app.core.auth import (
    create_token_pair,
    create_access_token,
    decode_token,
    get_current_user,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    REFRESH_TOKEN_EXPIRE_DAYS,
)
from app.core.errors import APIError, AuthenticationError
from app.models.user import User
from app.repositories.users import UserRepository
from app.schemas.common import MessageResponse
from app.schemas.user import (
    User as UserSchema,
    UserLogin,
    UserRegister,
    RegisterResponse,
    TokenResponse,
)
from app.services.users import UserService
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
from app.core.logging_config import log_security_event, get_client_ip

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def _cookie_kwargs(max_age: int) -> dict:
    # Set cookies with environment-aware security settings
    cookie_kwargs = {
        "httponly": True,  # XSS protection
        "secure": settings.COOKIE_SECURE,  # HTTPS only in production
        "samesite": settings.COOKIE_SAMESITE,  # CSRF protection
        "max_age": max_age,
    }
    if settings.COOKIE_DOMAIN:
        cookie_kwargs["domain"] = settings.COOKIE_DOMAIN
    return cookie_kwargs


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str = None):
    response.set_cookie(
        key="auth_token",
        value=access_token,
        **_cookie_kwargs(ACCESS_TOKEN_EXPIRE_MINUTES * 60),
    )
    if refresh_token:
        response.set_cookie(
            key="refresh_token",
            value=refresh_token,
            **_cookie_kwargs(60 * 60 * 24 * REFRESH_TOKEN_EXPIRE_DAYS),
        )


@router.post(
    "/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit("5/minute")
def register(request: Request, data: UserRegister, db: Session = Depends(get_db)):
    """Create a new author account."""
    user = UserService(db).register(data)

    log_security_event(
        event_type="auth.user.created",
        message="New user account created",
        user_id=user.id,
        username=user.email,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_method="POST",
        request_path="/api/auth/register",
        event_category="authentication",
    )

    return {"message": "User registered successfully", "user": user}


@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    db: Session = Depends(get_db),
):
    """Authenticate with email and password; tokens are returned and set as cookies."""
    client_ip = get_client_ip(request)
    try:
        user = UserService(db).authenticate(credentials.email, credentials.password)
    except APIError as e:
        log_security_event(
            event_type="auth.login.failure",
            message=f"Login failed: {e.message}",
            level=logging.WARNING,
            username=credentials.email,
            ip_address=client_ip,
            user_agent=request.headers.get("user-agent"),
            request_method="POST",
            request_path="/api/auth/login",
            event_category="authentication",
        )
        raise

    access_token, refresh_token = create_token_pair(user.id)
    _set_auth_cookies(response, access_token, refresh_token)

    log_security_event(
        event_type="auth.login.success",
        message="User logged in successfully",
        user_id=user.id,
        username=user.email,
        ip_address=client_ip,
        user_agent=request.headers.get("user-agent"),
        request_method="POST",
        request_path="/api/auth/login",
        event_category="authentication",
        auth_method="password",
    )

    return {
        "message": "Login successful",
        "access_token": access_token,
        "refresh_token": refresh_token,
        "user": user,
    }


@router.post("/refresh", response_model=MessageResponse)
@limiter.limit("30/minute")
def refresh_access_token(
    request: Request, response: Response, db: Session = Depends(get_db)
):
    """
    Refresh access token using refresh token.

    The refresh token is read from the ``refresh_token`` cookie and must be
    valid and not expired. The same refresh token is kept.
    """
    refresh_token = request.cookies.get("refresh_token")
    if not refresh_token:
        raise AuthenticationError("Refresh token not found")

    try:
        payload = decode_token(refresh_token, token_type="refresh")
        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid refresh token")

        # Verify user still exists and is active
        user = UserRepository(db).get(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("User not found or inactive")
    except AuthenticationError as e:
        log_security_event(
            event_type="auth.token.refresh_failed",
            message=f"Token refresh failed: {e.message}",
            level=logging.WARNING,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
            request_method="POST",
            request_path="/api/auth/refresh",
            event_category="authentication",
        )
        raise

    _set_auth_cookies(response, create_access_token(data={"sub": user.id}))

    log_security_event(
        event_type="auth.token.refreshed",
        message="Access token refreshed successfully",
        user_id=user.id,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        request_method="POST",
        request_path="/api/auth/refresh",
        event_category="authentication",
    )

    return {"message": "Token refreshed successfully"}


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, response: Response):
    """Logout endpoint - clears both auth and refresh tokens."""
    auth_token = request.cookies.get("auth_token")
    if auth_token:
        try:
            user_id = decode_token(auth_token).get("sub")
        except AuthenticationError:
            # An expired or invalid token still gets logged out
            user_id = None
        log_security_event(
            event_type="auth.logout.success",
            message="User logged out successfully",
            user_id=user_id,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("user-agent"),
            request_method="POST",
            request_path="/api/auth/logout",
            event_category="authentication",
        )

    for key in ("auth_token", "refresh_token"):
        response.delete_cookie(
            key=key,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
        )

    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserSchema)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    logger.debug(f"Get user info for user ID: {current_user.id}")
    return current_user
