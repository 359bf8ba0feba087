"""FastAPI dependencies for authentication and shared resources."""

import secrets
from collections.abc import AsyncIterator

from fastapi import Header, HTTPException, status

from core.config import PORTAL_API_KEY
from core.database import EmployeeStore, get_connection


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not PORTAL_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": "INTERNAL_ERROR",
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_api_key, PORTAL_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": "UNAUTHORIZED",
                "details": [],
            },
        )

    return x_api_key


async def get_employee_store() -> AsyncIterator[EmployeeStore]:
    """Employee store on a per-request SQLite connection."""
    conn = get_connection()
    try:
        yield EmployeeStore(conn)
    finally:
        conn.close()
