"""
Health check route.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tradesmen.api.dependencies import get_db
from tradesmen.lib.logging import get_logger
from tradesmen.lib.settings import settings

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> JSONResponse:
    """
    Report service health.

    Returns 200 with ``status: healthy`` when the database answers, otherwise
    503 with ``status: degraded``.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database query failed: {e}")
        db_status = "error_query"

    healthy = db_status == "ok"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.app_version,
            "checks": {"database": db_status},
        },
    )
