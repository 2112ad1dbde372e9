from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging
import time
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import sanitize_error_message
from app.core.timeutils import utcnow

router = APIRouter()
logger = logging.getLogger(__name__)


def check_database(db: Session) -> dict:
    started = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "latency": None,
            "error": sanitize_error_message(str(e), 503),
        }
    latency_ms = round((time.perf_counter() - started) * 1000, 2)
    return {"status": "healthy", "latency": latency_ms, "error": None}


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Service health with a database round trip; 503 when the database is down."""
    database = check_database(db)
    healthy = database["status"] == "healthy"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utcnow().isoformat() + "Z",
        "services": {"database": database},
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)
