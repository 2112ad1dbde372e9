from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
from app.core.config import settings
from app.core.database import engine, Base
from app.core.errors import register_exception_handlers
from app.core.logging_config import (
    setup_logging,
    CorrelationIdMiddleware,
    log_security_event,
)
from app.api.endpoints import (
    auth,
    posts,
    categories,
    subcategories,
    upload,
    health,
)
from app.services.scheduler import scheduler
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging

# Configure structured JSON logging
security_logger = setup_logging(logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # HTTP Strict Transport Security (HSTS)
        if settings.ENABLE_HSTS and settings.is_production:
            hsts_value = f"max-age={settings.HSTS_MAX_AGE}"
            if settings.HSTS_INCLUDE_SUBDOMAINS:
                hsts_value += "; includeSubDomains"
            if settings.HSTS_PRELOAD:
                hsts_value += "; preload"
            response.headers["Strict-Transport-Security"] = hsts_value

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Post bodies embed images and videos from external hosts
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "img-src 'self' data: https:; "
            "media-src 'self' https:; "
            "frame-src https:; "
            "style-src 'self' 'unsafe-inline'; "
            "frame-ancestors 'none';"
        )
        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=(), payment=()"
        )

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting Litaria application...")

    # Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    # Start scheduled publishing
    scheduler.start()

    yield

    logger.info("Shutting down Litaria application...")
    scheduler.shutdown()


def include_routers(app: FastAPI) -> None:
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(posts.router, prefix="/api/posts", tags=["posts"])
    app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
    app.include_router(
        subcategories.router, prefix="/api/subcategories", tags=["subcategories"]
    )
    app.include_router(upload.router, prefix="/api/upload", tags=["upload"])
    app.include_router(health.router, tags=["health"])


app = FastAPI(
    title="Litaria",
    description="Multilingual blog and literary publishing platform",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Add correlation ID middleware (first, so all logs have correlation IDs)
app.add_middleware(CorrelationIdMiddleware)

# Rate limits are declared on the auth routes
app.state.limiter = auth.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(SecurityHeadersMiddleware)

register_exception_handlers(app)

log_security_event(
    event_type="app.startup",
    message=f"Litaria application starting (production={settings.is_production})",
    event_category="system",
    production=settings.is_production,
    debug=settings.DEBUG,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

include_routers(app)

# Mount media files for serving uploaded images
media_path = Path(settings.MEDIA_ROOT)
media_path.mkdir(parents=True, exist_ok=True)
app.mount("/api/media", StaticFiles(directory=str(media_path)), name="media")


@app.get("/")
def root():
    return {
        "name": "Litaria",
        "version": settings.APP_VERSION,
        "description": "Multilingual blog and literary publishing platform",
    }
