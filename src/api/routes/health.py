"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.models.responses import HealthResponse
from core.config import API_VERSION, DB_PATH, STAGE

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if the database has not been initialized.
    """
    database_available = DB_PATH.exists()
    timestamp = datetime.now(timezone.utc).isoformat()

    if database_available:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            stage=STAGE,
            database_available=True,
            timestamp=timestamp,
        )
    return JSONResponse(
        status_code=503,
        content=HealthResponse(
            status="unhealthy",
            version=API_VERSION,
            stage=STAGE,
            database_available=False,
            timestamp=timestamp,
            error="Database not found, run scripts/init_db.py",
        ).model_dump(),
    )
